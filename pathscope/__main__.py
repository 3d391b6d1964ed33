"""Module entrypoint for ``python -m pathscope``.

All argument parsing and dispatch happen in ``pathscope.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
