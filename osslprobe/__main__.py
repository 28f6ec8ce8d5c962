"""Enable running osslprobe as a module: python -m osslprobe"""

import sys

from osslprobe import (
    cli,
)

if __name__ == "__main__":
    # pylint: disable=no-value-for-parameter
    sys.exit(cli())
