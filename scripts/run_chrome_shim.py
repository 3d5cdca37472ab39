#!/usr/bin/env python3
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# stdout is the native messaging channel; banner goes to stderr.
print(
    f"[chrome-shim] host={os.environ.get('CHROME_SHIM_HOST', 'cdp')} | "
    f"settings={os.environ.get('CHROME_SHIM_SETTINGS', 'data/settings/settings.json')} | "
    f"cdp_port={os.environ.get('CHROME_SHIM_CDP_PORT', '9222')}",
    file=sys.stderr,
)

from compat_servers.chrome_shim.native_host import main  # noqa: E402

if __name__ == "__main__":
    main()
