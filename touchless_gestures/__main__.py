import sys

from touchless_gestures.main import main

sys.exit(main())
