from __future__ import annotations

from semrel.cli.app import main

if __name__ == "__main__":
    main()
