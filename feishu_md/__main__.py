import sys

from feishu_md.cli import main

sys.exit(main())
