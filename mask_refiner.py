import logging
import sys

from PyQt5.QtWidgets import QApplication

from MR_Libs.EditorLib.mask_editor_window import MaskEditorWindow
from MR_Libs.RasterLib.raster_io import load_image_file

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    window = MaskEditorWindow()

    if len(sys.argv) > 1:
        try:
            image = load_image_file(sys.argv[1])
        except (OSError, ValueError) as exc:
            logger.error(f"Cannot open {sys.argv[1]}: {exc}")
        else:
            window.session.load_original(image)
            window.canvas.refresh()

    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
