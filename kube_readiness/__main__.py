import sys

from kube_readiness.cli import main

if __name__ == '__main__':
    sys.exit(main())
