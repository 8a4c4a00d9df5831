"""Allow `python -m print_agent`."""

from .app import main

if __name__ == '__main__':
    main()
