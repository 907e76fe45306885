import json
from dataclasses import dataclass

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class ServiceAccountCredential:
    client_email: str
    private_key: str
    token_uri: str = GOOGLE_TOKEN_URI

    def __repr__(self):
        # keep the key out of logs and tracebacks
        return f"ServiceAccountCredential(client_email={self.client_email!r}, token_uri={self.token_uri!r})"


def load_service_account(path: str) -> ServiceAccountCredential:
    """
    Reads a Google service-account JSON key file.

    Only `client_email` and `private_key` are required; `token_uri` is
    honoured when the key file carries one. Raises FileNotFoundError if
    the file is missing and ValueError if it is not a usable key.
    """
    with open(path, "r", encoding="utf-8") as key_file:
        try:
            info = json.load(key_file)
        except json.JSONDecodeError as e:
            raise ValueError(f"Service account key '{path}' is not valid JSON: {e}") from e

    if not isinstance(info, dict):
        raise ValueError(f"Service account key '{path}' must contain a JSON object.")

    missing = [field for field in ("client_email", "private_key") if not info.get(field)]
    if missing:
        raise ValueError(f"Service account key '{path}' is missing: {', '.join(missing)}")

    return ServiceAccountCredential(
        client_email=info["client_email"],
        private_key=info["private_key"],
        token_uri=info.get("token_uri") or GOOGLE_TOKEN_URI,
    )
