# NOTE: For displaying the decoded image in a GUI,
#       please download PyQt5.
#
# Installation (in terminal):
#   pip install PyQt5
import argparse
import logging
import sys

from PyQt5.QtWidgets import (
    QApplication, QWidget, QVBoxLayout, QPushButton, QLabel,
    QFileDialog, QTextEdit, QSlider, QHBoxLayout, QCheckBox
)
from PyQt5.QtGui import QPixmap, QImage, qRgb
from PyQt5.QtCore import Qt

from bmp_errors import BMPError
from bmp_parser import BMPParser

logger = logging.getLogger(__name__)


def image_to_qimage(image, brightness=1.0, scale=1.0, channels=(True, True, True)):
    """Blit a decoded Image into a QImage, top row first, nearest-neighbour scaled."""
    new_w = max(1, int(image.width * scale))
    new_h = max(1, int(image.height * scale))
    r_enabled, g_enabled, b_enabled = channels

    qimage = QImage(new_w, new_h, QImage.Format_RGB32)

    # Loop through each pixel and apply brightness and RGB toggle
    for y in range(new_h):
        # Image rows count up from the bottom, QImage rows count down from the top
        src_y = image.height - 1 - min(int(y / scale), image.height - 1)
        for x in range(new_w):
            src_x = min(int(x / scale), image.width - 1)

            R, G, B, _ = image.pixel(src_x, src_y)

            if not r_enabled:
                R = 0
            if not g_enabled:
                G = 0
            if not b_enabled:
                B = 0

            R = int(R * brightness)
            G = int(G * brightness)
            B = int(B * brightness)

            qimage.setPixel(x, y, qRgb(R, G, B))

    return qimage


def format_metadata(metadata):
    meta_text = ""
    for k, v in metadata.items():
        meta_text += f"{k}: {v}\n"
    return meta_text


class BMPViewer(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("BMP Viewer")
        self.resize(700, 500)

        # Decoded image and display settings
        self.image = None
        self.r_enabled = True
        self.g_enabled = True
        self.b_enabled = True
        self.brightness = 1.0
        self.scale = 1.0

        layout = QVBoxLayout()

        top_layout = QHBoxLayout()

        # Button to open BMP file
        self.open_button = QPushButton("Open BMP File")
        self.open_button.setFixedSize(150, 50)
        self.open_button.clicked.connect(self.open_file)
        top_layout.addWidget(self.open_button)

        top_layout.addStretch()

        # Checkboxes to enable/disable R, G, B channels
        self.r_button = QCheckBox("R")
        self.g_button = QCheckBox("G")
        self.b_button = QCheckBox("B")

        self.r_button.clicked.connect(self.toggle_r)
        self.g_button.clicked.connect(self.toggle_g)
        self.b_button.clicked.connect(self.toggle_b)

        for btn in (self.r_button, self.g_button, self.b_button):
            btn.setChecked(True)
            btn.setFixedSize(30, 30)
            top_layout.addWidget(btn)

        layout.addLayout(top_layout)

        # Label to display the image
        self.image_label = QLabel("No Image Loaded")
        self.image_label.setStyleSheet("border: 1px solid black; background: white;")
        self.image_label.setAlignment(Qt.AlignCenter)
        self.image_label.setFixedSize(700, 400)
        layout.addWidget(self.image_label)

        # Text box to display BMP metadata
        self.metadata_box = QTextEdit("No Metadata Loaded")
        self.metadata_box.setMinimumHeight(150)
        self.metadata_box.setReadOnly(True)
        layout.addWidget(self.metadata_box)

        # Slider for brightness adjustment
        self.brightness_slider = QSlider(Qt.Horizontal)
        self.brightness_slider.setRange(0, 100)
        self.brightness_slider.setValue(100)
        self.brightness_slider.valueChanged.connect(self.update_image)
        layout.addWidget(QLabel("Brightness"))
        layout.addWidget(self.brightness_slider)

        # Slider for scaling the image
        self.scale_slider = QSlider(Qt.Horizontal)
        self.scale_slider.setRange(1, 100)
        self.scale_slider.setValue(100)
        self.scale_slider.valueChanged.connect(self.update_image)
        layout.addWidget(QLabel("Scale"))
        layout.addWidget(self.scale_slider)

        self.setLayout(layout)

    # Ask for a BMP file and load it
    def open_file(self):
        filepath, _ = QFileDialog.getOpenFileName(self, "Open BMP File", "", "BMP Files (*.bmp)")
        if not filepath:
            return
        self.load_path(filepath)

    def load_path(self, filepath):
        parser = BMPParser(filepath)
        try:
            self.image = parser.load()
        except BMPError as e:
            # Decode failures are reported, never fatal to the viewer
            logger.error("Failed to decode %s: %s", filepath, e)
            self.image = None
            self.image_label.setText("No Image Loaded")
            self.metadata_box.setText(f"Cannot open {filepath}\n{type(e).__name__}: {e}")
            return False

        logger.info("Loaded %s (%d x %d)", filepath, self.image.width, self.image.height)
        self.metadata_box.setText(format_metadata(parser.metadata))
        self.update_image()
        return True

    # Update image display based on settings
    def update_image(self):
        if self.image is None:
            return

        self.brightness = self.brightness_slider.value() / 100.0
        self.scale = self.scale_slider.value() / 100.0

        qimage = image_to_qimage(
            self.image,
            brightness=self.brightness,
            scale=self.scale,
            channels=(self.r_enabled, self.g_enabled, self.b_enabled),
        )

        # Show updated image
        pixmap = QPixmap.fromImage(qimage)
        self.image_label.setPixmap(pixmap)

    # Toggle R channel
    def toggle_r(self):
        self.r_enabled = self.r_button.isChecked()
        self.update_image()

    # Toggle G channel
    def toggle_g(self):
        self.g_enabled = self.g_button.isChecked()
        self.update_image()

    # Toggle B channel
    def toggle_b(self):
        self.b_enabled = self.b_button.isChecked()
        self.update_image()


def print_info(path):
    parser = BMPParser(path)
    try:
        image = parser.load()
    except BMPError as e:
        logger.error("Failed to decode %s: %s", path, e)
        print(f"{path}: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print(f"{path}: {image.width} x {image.height}, {len(image.pixels)} pixels")
    print(format_metadata(parser.metadata), end="")
    return 0


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="bmp-viewer",
        description="Decode and display Windows Bitmap (BMP) images.",
    )
    parser.add_argument("path", nargs="?", help="BMP file to open")
    parser.add_argument("--info", action="store_true", help="Print the BMP metadata and exit (no window)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    return parser


def main(argv=None):
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.info:
        if not args.path:
            print("--info needs a BMP path", file=sys.stderr)
            return 2
        return print_info(args.path)

    app = QApplication(sys.argv[:1])
    viewer = BMPViewer()
    if args.path:
        viewer.load_path(args.path)
    viewer.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
