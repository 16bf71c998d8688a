"""Entry point for `python -m llm_usage_tracker`."""

import sys


def main():
    from llm_usage_tracker.app import run
    sys.exit(run())


if __name__ == "__main__":
    main()
