import threading
import logging

import pystray
from PIL import Image, ImageDraw


def make_moon_image(size: int = 64) -> Image.Image:
    img = Image.new("RGBA", (size, size), color=(18, 22, 48, 255))
    draw = ImageDraw.Draw(img)
    pad = size // 8
    draw.ellipse((pad, pad, size - pad, size - pad), fill=(250, 232, 180, 255))
    # Crescent cut-out
    shift = size // 4
    draw.ellipse((pad + shift, pad - shift // 2, size - pad + shift, size - pad - shift // 2), fill=(18, 22, 48, 255))
    return img


class TrayController:
    """Tray icon offering Show/Quit while the window is hidden.

    pystray runs its own loop, so callbacks arrive off the Tk thread;
    the app is expected to marshal them with root.after.
    """

    def __init__(self, title: str, on_show, on_quit, logger: logging.Logger | None = None):
        self._title = title
        self._on_show = on_show
        self._on_quit = on_quit
        self._logger = logger or logging.getLogger("DreamRhythm")

        self._icon = None
        self._thread = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def ensure_running(self) -> None:
        if self._icon is not None and self._running:
            return

        menu = pystray.Menu(
            pystray.MenuItem("Show", lambda icon, item: self._on_show(), default=True),
            pystray.MenuItem("Quit", lambda icon, item: self._on_quit()),
        )
        self._icon = pystray.Icon("DreamRhythm", make_moon_image(), self._title, menu)

        def run_icon():
            self._running = True
            try:
                self._icon.run()
            except Exception:
                self._logger.exception("Tray icon loop failed")
            finally:
                self._running = False

        self._thread = threading.Thread(target=run_icon, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._icon is None:
            return
        try:
            self._icon.stop()
        except Exception:
            self._logger.exception("Tray icon stop failed")
        self._icon = None
