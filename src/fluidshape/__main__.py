"""
Run with: python -m fluidshape
"""
from fluidshape.main import main

if __name__ == "__main__":
    main()
