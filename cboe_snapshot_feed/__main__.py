import sys

from cboe_snapshot_feed.pipeline import main

sys.exit(main())
