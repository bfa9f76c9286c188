"""Q-Learning Lab - hands-on tabular Q-learning on a small grid world.

A learner edits a grid, steps an agent through it and fills in a Q-table by
hand while the lab keeps a reference table to check the answers against.
"""

__version__ = "1.0.0"
__author__ = "Q-Learning Lab"
