"""
Boxes Subpackage

    - xyz.py: String-crossing window for the seven modal boxes
    - shapes.py: Major, pentatonic and blues box generation
    - blues.py: Blue-note placement
    - display.py: Left-to-right display ordering
"""

from fretboard_engine.boxes.shapes import generate_box_shape_patterns, get_box_scale_family_options
from fretboard_engine.boxes.display import get_display_ordered_box_patterns
