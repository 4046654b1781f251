#!/usr/bin/env python3
from nova.cli import main

if __name__ == "__main__":
    main()
