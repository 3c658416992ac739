"""Entry point for 'python -m appcanvas'."""

from appcanvas.cli import main

if __name__ == "__main__":
    main()
