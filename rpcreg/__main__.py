"""
Module implementing the command-line interface and invoking the main logic of rpcreg.

rpcreg is run when the NFS server starts or stops to announce (or withdraw) the NFS,
MOUNT and status monitor services with the system port mapper. Without flags it
withdraws any stale registrations and then registers NFS and MOUNT on their well-known
ports. With -u it only withdraws, and with -s it only registers the status monitor.

Registration failures are logged to stderr but are not reflected in the exit code, so
that a partially successful registration never blocks the server from starting.
"""

import logging
import signal
import sys
from typing import List, NoReturn, Optional

from rpcreg.args import Arguments
from rpcreg.config import Config
import rpcreg.constants as constants
from rpcreg.logger import log
import rpcreg.operations as operations


def main(arguments: Optional[List[str]] = None) -> NoReturn:
    """
    Run rpcreg with the given arguments.

    Defaults to parsing command-line arguments from sys.argv if none are specified.
    """
    # Parse command-line arguments.
    args = Arguments.parse(arguments)

    # Configure debug logging.
    if args.debug:
        log.setLevel(logging.DEBUG)
    else:
        log.setLevel(logging.ERROR)

    config = Config.load(args.config)

    ops = operations.Operations(args, config)

    try:
        exit_code = ops.run()
    except KeyboardInterrupt:
        exit_code = 128 + signal.SIGINT
    except Exception as e:
        log.error(f"failed to run rpcreg: {e}")
        exit_code = constants.RPCREG_ERROR_CODE

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
