"""Grid view for the Q-learning lab map."""

from typing import Dict, Tuple
from PySide6.QtWidgets import QGraphicsView, QGraphicsScene
from PySide6.QtGui import QPainter
from PySide6.QtCore import Qt

from ..app.controller import LabController
from .tiles import GridTile


class GridView(QGraphicsView):
    """Graphics view for displaying and editing the lab grid."""

    def __init__(self, controller: LabController):
        super().__init__()

        self.controller = controller
        self.scene = QGraphicsScene()
        self.setScene(self.scene)

        self.tiles: Dict[Tuple[int, int], GridTile] = {}
        self.tile_size = 64.0

        self.setRenderHint(QPainter.Antialiasing)

        # Connect controller signals
        self.controller.grid_updated.connect(self.update_grid)

        # Initial grid update
        self.update_grid()

    def update_grid(self):
        """Update the visual grid from the controller's grid."""
        grid = self.controller.grid

        # Rebuild tiles only when the dimensions changed
        if len(self.tiles) != grid.rows * grid.cols or (grid.cols - 1, grid.rows - 1) not in self.tiles:
            self.scene.clear()
            self.tiles.clear()
            self.scene.setSceneRect(0, 0, grid.cols * self.tile_size, grid.rows * self.tile_size)
            for pos in grid.positions():
                tile = GridTile(pos.x, pos.y, self.tile_size, grid.cell_at(pos))
                self.scene.addItem(tile)
                self.tiles[(pos.x, pos.y)] = tile

        agent = self.controller.agent_pos
        for (x, y), tile in self.tiles.items():
            tile.cell = grid.cell_at((x, y))
            tile.set_agent((x, y) == tuple(agent))

        self.fit_in_view()

    def mousePressEvent(self, event):
        """Handle mouse press events for tile editing."""
        if event.button() == Qt.LeftButton:
            scene_pos = self.mapToScene(event.pos())
            x = int(scene_pos.x() // self.tile_size)
            y = int(scene_pos.y() // self.tile_size)

            if self.controller.grid.is_valid_coord((x, y)):
                self.controller.click_cell((x, y))

        super().mousePressEvent(event)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.fit_in_view()

    def fit_in_view(self):
        """Fit the entire grid in the view."""
        if self.scene.items():
            self.fitInView(self.scene.sceneRect(), Qt.KeepAspectRatio)
