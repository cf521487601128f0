"""Built-in leaf displays registered by ``default_display_factory()``."""

from pyqt_displays.model.display import Display


class GridDisplay(Display):
    """Grid on a plane around a reference frame."""

    DEFAULT_PARAMETERS = {
        "Reference Frame": "<Fixed Frame>",
        "Plane Cell Count": 10,
        "Normal Cell Count": 0,
        "Cell Size": 1.0,
        "Line Style": {"Value": "Lines", "Line Width": 0.03},
        "Color": "160; 160; 164",
        "Alpha": 0.5,
        "Plane": "XY",
        "Offset": {"X": 0.0, "Y": 0.0, "Z": 0.0},
    }


class AxesDisplay(Display):
    """Set of axes at a reference frame."""

    DEFAULT_PARAMETERS = {
        "Reference Frame": "<Fixed Frame>",
        "Length": 1.0,
        "Radius": 0.1,
    }
