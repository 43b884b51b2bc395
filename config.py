import argparse
import configparser
from enum import Enum
from pathlib import Path
from dataclasses import dataclass

from presets import PRESETS_FILE, get_config_dir


LOG_FILE = "postui.log"


class ColorMode(Enum):
    """
    Indicates the structure of the escape equence
    """
    # ColorMode {{{
    Bit4 = "4bit"       # Color immediately after CSI
    Bit8 = "8bit"       # Sequence is as follows: 35:5:{color}
    Bit24 = "24bit"     # RGB color sequence
    # }}}


class BorderStyle(Enum):
    # BorderStyle {{{
    Single = "single"
    Double = "double"
    Rounded = "rounded"
    # }}}


@dataclass
class Theme:
    # Theme {{{
    text_color:     str
    title_color:    str
    border_color:   str
    active_color:   str
    selected_color: str
    error_color:    str
    success_color:  str
    # }}}


@dataclass
class Arguments:
    # Arguments {{{
    debug: bool = False
    file: Path = None
    theme_file: Path = None
    color_mode: ColorMode = ColorMode.Bit24
    border_style: BorderStyle = BorderStyle.Rounded

    @property
    def log_file(self) -> Path:
        return Path(self.file).parent / LOG_FILE
    # }}}


# Theme ini key for every Theme field
THEME_KEYS = {
    "text_color": "text_color",
    "title_color": "title_color",
    "border_color": "border_color",
    "active_color": "active_section_color",
    "selected_color": "selected_color",
    "error_color": "error_color",
    "success_color": "success_color",
}


def parse_args(argv: list[str] | None = None) -> Arguments:
    # parse_args {{{
    description = "Compose, send and save HTTP requests in the terminal"
    parser = argparse.ArgumentParser(prog="postui", description=description)

    parser.add_argument("-t", "--theme",
                        help="Path to theme file " +
                        "(defaults to 'theme.ini')")

    parser.add_argument("-m", "--mode",
                        choices=[mode.value for mode in ColorMode],
                        help="Color style: '4bit', '8bit', or '24bit' " +
                        "(defaults to '24bit')")

    parser.add_argument("-b", "--border",
                        choices=[style.value for style in BorderStyle],
                        help="Border style: 'single', 'double' or " +
                        "'rounded' (defaults to 'rounded')")

    parser.add_argument("-f", "--file",
                        help="Path to saved requests file " +
                        f"(defaults to '<config dir>/{PRESETS_FILE}')")

    parser.add_argument("-g", "--debug", action="store_true",
                        help=argparse.SUPPRESS)

    args = Arguments()
    parsed_args = parser.parse_args(argv)

    if parsed_args.theme is not None:
        args.theme_file = Path(parsed_args.theme)
    else:
        # Ensure we can run this script with anywhere
        scriptdir = Path(__file__).parent
        args.theme_file = Path(scriptdir, "theme.ini")

    if parsed_args.mode is not None:
        args.color_mode = (ColorMode)(parsed_args.mode.lower())

    if parsed_args.border is not None:
        args.border_style = (BorderStyle)(parsed_args.border.lower())

    if parsed_args.file is not None:
        args.file = Path(parsed_args.file)
    else:
        args.file = Path(get_config_dir(), PRESETS_FILE)

    args.debug = parsed_args.debug

    return args
    # }}}


def parse_colors(args: Arguments) -> Theme:
    """
    Reads the section of the theme file matching the
    color mode. Raises ValueError for a missing file,
    section or key, or for a malformed color.
    """
    # parse_colors {{{
    cp = configparser.ConfigParser()
    if not cp.read(args.theme_file):
        raise ValueError(f"Theme file [{args.theme_file}] not found")

    mode = args.color_mode.value
    if not cp.has_section(mode):
        raise ValueError(f"Theme file has no [{mode}] section")

    colors = {}
    for name, key in THEME_KEYS.items():
        if not cp.has_option(mode, key):
            raise ValueError(f"Theme file is missing {key} in [{mode}]")
        colors[name] = validate_colors(key, cp[mode][key], args.color_mode)

    return Theme(**colors)
    # }}}


def validate_colors(key: str, color: str, mode: ColorMode) -> str:
    """
    We may be expecting an integer value or an array depending
    on the color mode. This validates the expected format.
    """
    # validate_colors {{{
    if mode == ColorMode.Bit24:
        split = color.split(",")
        if len(split) != 3 or not all(p.strip().isdigit() for p in split):
            raise ValueError(f"Invalid RGB color format for {key}={color}")
        return ",".join(part.strip() for part in split)
    else:
        try:
            int(color)
            return color.strip()
        except ValueError:
            raise ValueError(f"Color must be an integer for {key}={color}")
    # }}}
