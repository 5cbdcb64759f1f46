"""
Internal constants.
"""

import os

from . import __title__

# stamp recording the patches currently applied to a source tree, relative
# to the package's srcdir
PATCHES_STAMP = 'patches-autobuild-stamp'

# prefix of the environment variables overriding tool locations,
# e.g. SRCBUILD_TOOL_PATCH=/usr/bin/gpatch
TOOL_ENV_PREFIX = f'{__title__.upper()}_TOOL_'

# variable whose entries are mirrored into sys.path when extended
MODULE_PATH_VAR = 'PYTHONPATH'

PATH_SEPARATOR = os.pathsep
