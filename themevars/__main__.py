"""Entry point for `python -m themevars`."""

import sys


def main():
    from themevars.app import run_app
    sys.exit(run_app())


if __name__ == "__main__":
    main()
