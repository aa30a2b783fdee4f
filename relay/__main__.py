"""Allow running the relay as a module: python -m relay."""

from relay.runner import main

if __name__ == "__main__":
    main()
