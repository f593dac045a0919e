import base64
import glob
import re

def hex_to_rgb(hex_str):
    hex_str = hex_str.lstrip('#')
    if not hex_str: return (0, 0, 0)
    if len(hex_str) == 3: hex_str = "".join(c*2 for c in hex_str)
    return tuple(int(hex_str[i:i+2], 16) for i in (0, 2, 4))

def rgb_to_hex(r, g, b):
    return '#{:02x}{:02x}{:02x}'.format(r, g, b)

def encode_base64(text):
    return base64.b64encode(text.encode("utf-8")).decode("ascii")

def decode_base64(text):
    return base64.b64decode(text.encode("ascii"), validate=True).decode("utf-8")

_REGEX_CHARS = re.compile(r'[\\^$.|?*+()\[\]{}]')

def is_potential_regex(text):
    """True when text has characters that only make sense in a regular expression."""
    return bool(text) and _REGEX_CHARS.search(text) is not None

def expand_log_paths(patterns):
    """
    Expands wildcards (for shells that don't, like CMD).
    Patterns without matches are kept as is so that opening them reports the missing file.
    """
    paths = []
    for pattern in patterns:
        if any(c in pattern for c in '*?['):
            matches = sorted(glob.glob(pattern))
            if matches:
                paths.extend(matches)
                continue
        paths.append(pattern)
    return paths
