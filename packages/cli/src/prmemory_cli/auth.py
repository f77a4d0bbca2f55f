"""GitHub token resolution, with OAuth device flow as the last resort.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (already read into config)
  2. The saved token file from a previous device-flow login (.github-token)
  3. `gh auth token` (GitHub CLI session)
  4. Device flow, if GITHUB_CLIENT_ID is configured: the user opens
     https://github.com/login/device, enters a code, and the resulting
     token is saved to the token file for next time.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

import click
import requests
from rich.console import Console

from prmemory_core.errors import AuthenticationError

console = Console()
logger = logging.getLogger(__name__)

GITHUB_DEVICE_CODE_URL = "https://github.com/login/device/code"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
DEFAULT_VERIFICATION_URI = "https://github.com/login/device"
DEFAULT_SCOPE = "read:user repo"
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"

# GitHub asks clients to add 5 seconds to the polling interval on slow_down.
_SLOW_DOWN_STEP = 5


def read_token_file(path: str | Path) -> str | None:
    try:
        token = Path(path).read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return token or None


def save_token_file(path: str | Path, token: str) -> None:
    p = Path(path)
    p.write_text(token, encoding="utf-8")
    p.chmod(0o600)


def _gh_cli_token() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode == 0:
        token = result.stdout.strip()
        if token:
            logger.debug("Resolved GitHub token via gh CLI session.")
            return token
    return None


def resolve_github_token(config: dict) -> str | None:
    """Return a GitHub token from config, token file or gh CLI, or None.

    Never raises and never starts an interactive login.
    """
    token = config.get("github_token")
    if token:
        return token.strip()

    token = read_token_file(config.get("token_path", ".github-token"))
    if token:
        logger.debug("Resolved GitHub token from token file.")
        return token

    return _gh_cli_token()


@dataclass
class DeviceCode:
    device_code: str
    user_code: str
    verification_uri: str
    interval: int


class DeviceFlow:
    """GitHub OAuth device flow (no localhost callback server needed)."""

    def __init__(self, client_id: str, scope: str = DEFAULT_SCOPE, session: requests.Session | None = None):
        self._client_id = client_id
        self._scope = scope
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        self.interval = 5

    def request_code(self) -> DeviceCode:
        response = self._session.post(
            GITHUB_DEVICE_CODE_URL,
            data={"client_id": self._client_id, "scope": self._scope},
            timeout=30,
        )
        if not response.ok:
            raise AuthenticationError(f"GitHub device code request failed: {response.status_code} {response.text}")

        data = response.json()
        if data.get("error"):
            raise AuthenticationError(
                f"GitHub: {data['error']} - {data.get('error_description', '')}. "
                "Enable Device flow in your OAuth app settings."
            )

        self.interval = int(data.get("interval") or 5)
        return DeviceCode(
            device_code=data["device_code"],
            user_code=data["user_code"],
            verification_uri=data.get("verification_uri") or DEFAULT_VERIFICATION_URI,
            interval=self.interval,
        )

    def poll(self, device_code: str) -> str | None:
        """Return the access token, or None while the user hasn't authorized yet."""
        response = self._session.post(
            GITHUB_TOKEN_URL,
            data={"client_id": self._client_id, "device_code": device_code, "grant_type": DEVICE_GRANT_TYPE},
            timeout=30,
        )
        data = response.json()
        error = data.get("error")
        if error == "authorization_pending":
            return None
        if error == "slow_down":
            self.interval = int(data.get("interval") or self.interval + _SLOW_DOWN_STEP)
            return None
        if error:
            raise AuthenticationError(f"GitHub: {error} - {data.get('error_description', '')}")
        token = data.get("access_token")
        if not token:
            raise AuthenticationError("GitHub did not return an access token")
        return token

    def wait_for_token(self, device_code: str, sleep=time.sleep) -> str:
        while True:
            sleep(self.interval)
            token = self.poll(device_code)
            if token:
                return token


def run_device_flow_login(config: dict, open_browser: bool = True) -> str:
    """Log in via device flow, save the token to the token file and return it."""
    flow = DeviceFlow(config["github_client_id"])
    code = flow.request_code()

    console.print(f"Open [bold]{code.verification_uri}[/bold] and enter code: [bold cyan]{code.user_code}[/bold cyan]")
    if open_browser:
        click.launch(code.verification_uri)

    token = flow.wait_for_token(code.device_code)
    save_token_file(config.get("token_path", ".github-token"), token)
    console.print("[green]Logged in to GitHub.[/green]")
    return token


def require_github_token(config: dict) -> str:
    """Resolve a token or log in interactively; raise a click error if neither works."""
    token = resolve_github_token(config)
    if token:
        return token

    if not config.get("github_client_id"):
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN, run `gh auth login`, "
            "or set GITHUB_CLIENT_ID to log in with the device flow."
        )

    try:
        return run_device_flow_login(config)
    except (AuthenticationError, requests.RequestException) as e:
        raise click.ClickException(str(e))
