"""Allow running as: python -m assessment_engine"""

from assessment_engine.main import main

if __name__ == "__main__":
    main()
