import sys

from code_agent.agent import main


if __name__ == "__main__":
    sys.exit(main())
