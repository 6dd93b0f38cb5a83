from __future__ import annotations

import plistlib
import subprocess
from pathlib import Path
from typing import Callable, Optional, Tuple

PROFILES_DIR = Path.home() / "Library" / "MobileDevice" / "Provisioning Profiles"

ProfileInfo = Tuple[Optional[Path], Optional[str], Optional[str]]
DecodeFn = Callable[[Path], bytes]


class ProvisioningProfileError(RuntimeError):
    pass


def decode_profile(path: Path) -> bytes:
    """Strip the CMS signature from a .mobileprovision and return the plist bytes."""
    proc = subprocess.run(["security", "cms", "-D", "-i", str(path)], capture_output=True, check=False)
    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        raise ProvisioningProfileError(f"Unable to decode provisioning profile: {path} ({stderr})")
    return proc.stdout


def locate_profile(value: str, *, profiles_dir: Optional[Path] = None) -> Optional[Path]:
    candidate = Path(value).expanduser()
    if candidate.is_file():
        return candidate
    installed = (profiles_dir or PROFILES_DIR) / value
    if installed.is_file():
        return installed
    return None


def extract_provisioning_profile(
    value: str,
    *,
    profiles_dir: Optional[Path] = None,
    decode: Optional[DecodeFn] = None,
) -> ProfileInfo:
    """Resolve a provisioning profile to (path, UUID, name).

    `value` is a path, or a file name inside the installed profiles directory.
    When no file is found, the value is taken to be a profile name.
    """

    path = locate_profile(value, profiles_dir=profiles_dir)
    if path is None:
        return None, None, value

    raw = (decode or decode_profile)(path)
    try:
        payload = plistlib.loads(raw)
    except (plistlib.InvalidFileException, ValueError) as exc:
        raise ProvisioningProfileError(f"Malformed provisioning profile: {path} ({exc})") from exc

    uuid = payload.get("UUID")
    name = payload.get("Name")
    return path, (str(uuid) if uuid else None), (str(name) if name else None)
