import sys

from kubeadmit.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
