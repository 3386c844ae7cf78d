"""
bafseg can be run as a module by invoking it as:
python -m bafseg <command> <arguments> ..
"""

import sys
import warnings
import bafseg

from bafseg.utils.commands import commands, command_aliases

from bafseg.utils.segment_baf import main as segment_baf  # noqa: F401
from bafseg.utils.segment_baf import main_sv as segment_baf_sv  # noqa: F401


def print_usage():
    print('bafseg v' + bafseg.__version__)
    print('Usage: bafseg <command> <arguments ..>')
    print('\nThe following commands are supported:\n ' + '\n '.join(commands))


def main():

    if len(sys.argv) < 2:
        print_usage()
        sys.exit(0)

    command = sys.argv[1]
    args = sys.argv[2:]

    if command in command_aliases:
        msg = (
            f'The bafseg command "{command}" has been renamed to "{command_aliases[command]}". '
            f'Please update your scripts accordingly.'
        )
        warnings.warn(msg, FutureWarning)
    elif command not in commands:
        print_usage()
        sys.exit(1)

    command = command_aliases.get(command, command)
    command = command.replace('-', '_')
    globals()[command](args)


if __name__ == '__main__':
    sys.exit(main())
