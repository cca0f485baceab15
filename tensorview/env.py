import os

DEBUG = int(os.getenv("DEBUG", "0"))
ALIGN = os.getenv("ALIGN", "trailing")

OPT_FLATTEN = int(os.getenv("OPT_FLATTEN", "1"))

assert ALIGN in ("trailing", "leading"), f"broadcast alignment {ALIGN} not supported!"
