import sys

try:
    from fontlens.app import main
except ImportError as e:
    print("Error: Could not import the FontLens application.")
    print("Please install the project first (e.g. `pip install -e .`).")
    print(f"Details: {e}")
    sys.exit(1)


if __name__ == '__main__':
    # Allows running from a checkout: python main.py IMAGE [options]
    sys.exit(main())
