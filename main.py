import sys

from dotenv import load_dotenv

from catalog_mirror.main import main

load_dotenv()


if __name__ == "__main__":
    sys.exit(main())
