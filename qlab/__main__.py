"""Main entry point for the Q-Learning Lab."""

import sys
import os
import signal
import argparse
from typing import List, Optional

from .domain.types import LabConfig


def parse_args(argv: Optional[List[str]] = None) -> LabConfig:
    """Build the session configuration from command-line options."""
    defaults = LabConfig()
    parser = argparse.ArgumentParser(description="Interactive Q-learning grid world lab")
    parser.add_argument("--rows", type=int, default=defaults.rows, help="Initial grid rows (2-8)")
    parser.add_argument("--cols", type=int, default=defaults.cols, help="Initial grid columns (2-8)")
    parser.add_argument("--alpha", type=float, default=defaults.learning_rate, help="Learning rate")
    parser.add_argument("--gamma", type=float, default=defaults.discount_factor, help="Discount factor")
    parser.add_argument("--goal-reward", type=float, default=defaults.goal_reward, help="Reward of goal cells")
    parser.add_argument("--trap-reward", type=float, default=defaults.trap_reward, help="Reward of trap cells")
    parser.add_argument("--seed", type=int, default=None, help="Seed for random steps")
    args = parser.parse_args(argv)

    return LabConfig(
        rows=args.rows,
        cols=args.cols,
        learning_rate=args.alpha,
        discount_factor=args.gamma,
        goal_reward=args.goal_reward,
        trap_reward=args.trap_reward,
        seed=args.seed
    )


def main(argv: Optional[List[str]] = None):
    """Main entry point for the lab application."""
    config = parse_args(argv)

    os.environ.setdefault('QT_LOGGING_RULES', 'qt.qpa.backingstore=false')

    from PySide6.QtWidgets import QApplication

    app = QApplication(sys.argv[:1])
    app.setApplicationName("Q-Learning Lab")
    app.setApplicationVersion("1.0.0")

    # Import UI components (after QApplication is created)
    from .ui.main_window import MainWindow
    from .app.controller import LabController

    window = None

    def signal_handler(sig, frame):
        """Handle system signals for graceful shutdown."""
        print(f"\nReceived signal {sig}, shutting down...")
        if window:
            window.close()
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        controller = LabController(config)
        window = MainWindow(controller)

        window.show()
        return app.exec()

    except Exception as e:
        print(f"Application error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
