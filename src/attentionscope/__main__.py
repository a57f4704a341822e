import sys

from attentionscope.cli import main

sys.exit(main())
