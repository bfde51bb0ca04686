import sys

from fs2laynii.fs2laynii import main

sys.exit(main())
