"""Entry point for ``python -m mmscript``."""

from mmscript.main import main

if __name__ == "__main__":
    raise SystemExit(main())
