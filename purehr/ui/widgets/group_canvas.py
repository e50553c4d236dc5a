from __future__ import annotations
import logging

from PySide6.QtCore import QPointF, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QBrush, QColor, QFont, QPainter, QPainterPath, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from purehr.domain.models import RoomStyle
from purehr.services.room_layout import PADDING, stage_height
from purehr.services.scene import SeatingScene

log = logging.getLogger(__name__)

FRAME_MS = 16          # ~60 images/s
CARD_MARGIN = 8.0
CARD_RADIUS = 12.0


class GroupCanvas(QWidget):
    """
    Vue de la salle : dessine zones et jetons de la ``SeatingScene``.
    Un QTimer fait avancer la simulation d'un pas par image ; la souris
    alimente l'automate de glisser-déposer.
    """

    reassigned = Signal(str, int, int)  # person_id, source, target

    def __init__(self, scene: SeatingScene, parent=None):
        super().__init__(parent)
        self.scene = scene
        self.setMouseTracking(False)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumWidth(320)

        self._timer = QTimer(self)
        self._timer.setInterval(FRAME_MS)
        self._timer.timeout.connect(self._on_frame)

        self._viewport_height = 600.0

    # --- cycle de vie
    def set_viewport(self, width: float, height: float) -> None:
        """Dimensions visibles du conteneur (scroll area)."""
        self._viewport_height = float(height)
        self.scene.resize(width, height)
        self._sync_height()
        # moteur stabilisé relancé par le redimensionnement : le timer doit suivre
        self.wake()
        self.update()

    def refresh(self) -> None:
        """À appeler après un changement de groupes ou de style."""
        self._sync_height()
        self.wake()
        self.update()

    def wake(self) -> None:
        if self.scene.running and not self._timer.isActive():
            self._timer.start()

    def showEvent(self, event):
        super().showEvent(event)
        self.scene.start()
        self._sync_height()
        self.wake()

    def hideEvent(self, event):
        # simulation arrêtée, pas mise en pause : une neuve au retour
        self._timer.stop()
        self.scene.stop()
        super().hideEvent(event)

    def shutdown(self) -> None:
        self._timer.stop()
        self.scene.stop()

    def _sync_height(self) -> None:
        height = int(self.scene.height)
        if height != self.height():
            self.setFixedHeight(height)

    # --- boucle
    def _on_frame(self) -> None:
        if not self.scene.tick() and not self.scene.drag.dragging:
            self._timer.stop()
        self.update()

    # --- rendu
    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        try:
            self._paint_stage(painter)
            self._paint_zones(painter)
            self._paint_tokens(painter)
        finally:
            painter.end()

    def _paint_stage(self, painter: QPainter) -> None:
        stage = stage_height(self.scene.style)
        if not stage:
            return
        band = QRectF(PADDING, PADDING, max(0.0, self.width() - 2 * PADDING), stage - CARD_MARGIN)
        painter.setPen(Qt.NoPen)
        painter.setBrush(QColor(0, 0, 0, 20))
        painter.drawRoundedRect(band, CARD_RADIUS, CARD_RADIUS)
        painter.setPen(QColor("gray"))
        painter.drawText(band, Qt.AlignCenter, "講台 / Scène")

    def _paint_zones(self, painter: QPainter) -> None:
        theater = self.scene.style is RoomStyle.THEATER
        for group in self.scene.board.groups:
            zone = self.scene.zones.get(group.id)
            if zone is None:
                continue
            color = QColor(zone.color)
            card = QRectF(
                zone.x + CARD_MARGIN,
                zone.y + CARD_MARGIN,
                max(0.0, zone.width - 2 * CARD_MARGIN),
                max(0.0, zone.height - 2 * CARD_MARGIN),
            )

            # Fond de la carte
            pen = QPen(color, 1)
            if theater:
                pen.setStyle(Qt.DashLine)
            painter.setPen(pen)
            painter.setBrush(QColor(255, 255, 255, 26))
            painter.drawRoundedRect(card, CARD_RADIUS, CARD_RADIUS)

            # Bandeau
            header = QPainterPath()
            header.addRoundedRect(QRectF(card.x(), card.y(), card.width(), min(card.height(), 2 * CARD_RADIUS)),
                                  CARD_RADIUS, CARD_RADIUS)
            band = QColor(color)
            band.setAlphaF(0.3)
            painter.fillPath(header, band)

            # Libellés
            painter.setPen(QColor("#1D1D1F"))
            font = QFont(painter.font())
            font.setPointSize(9)
            font.setBold(True)
            painter.setFont(font)
            painter.drawText(QRectF(card.x(), card.y() + 4, card.width(), 18), Qt.AlignHCenter, group.name)

            font.setBold(False)
            font.setPointSize(8)
            painter.setFont(font)
            painter.setPen(QColor("gray"))
            painter.drawText(QRectF(card.x(), card.bottom() - 20, card.width() - 10, 16),
                             Qt.AlignRight, str(len(group.members)))

    def _paint_tokens(self, painter: QPainter) -> None:
        dragged = self.scene.drag.state.token_id if self.scene.drag.dragging else None
        for token in self.scene.snapshot():
            zone = self.scene.zones.get(token.group_id)
            fill = QColor(zone.color if zone else "#cccccc")
            fill.setAlphaF(0.9)

            if token.id == dragged:
                painter.setPen(QPen(QColor("#007AFF"), 3))
            else:
                painter.setPen(QPen(QColor("white"), 2))
            painter.setBrush(QBrush(fill))
            center = QPointF(token.x, token.y)
            painter.drawEllipse(center, token.radius, token.radius)

            font = QFont(painter.font())
            font.setBold(True)
            font.setPixelSize(self._name_pixel_size(token.name))
            painter.setFont(font)
            painter.setPen(QColor("white"))
            painter.drawText(
                QRectF(token.x - token.radius, token.y - token.radius, 2 * token.radius, 2 * token.radius),
                Qt.AlignCenter,
                token.name,
            )

    @staticmethod
    def _name_pixel_size(name: str) -> int:
        if len(name) > 4:
            return 7
        if len(name) > 3:
            return 9
        return 11

    # --- souris
    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            return super().mousePressEvent(event)
        pos = event.position()
        if self.scene.drag.press(pos.x(), pos.y()):
            self.setCursor(Qt.ClosedHandCursor)
            self.wake()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if self.scene.drag.dragging:
            pos = event.position()
            self.scene.drag.move(pos.x(), pos.y())
            self.update()
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.LeftButton or not self.scene.drag.dragging:
            return super().mouseReleaseEvent(event)
        pos = event.position()
        self.unsetCursor()
        try:
            moved = self.scene.drag.release(pos.x(), pos.y())
        except Exception:
            log.exception("Déplacement échoué")
            self.scene.drag.cancel()
            moved = None
        self.wake()
        self.update()
        if moved is not None:
            self.reassigned.emit(moved.person_id, moved.source_group, moved.target_group)
        event.accept()
