# ddnsclient

Building blocks for a small dynamic DNS (DDNS) update client. The package
covers the parts a DDNS client needs to talk to "what's my IP" checkers and
update servers and to manage its providers:

- `ddnsclient.tcp` – `TcpSocket`, a TCP connection with host resolution,
  IPv4/IPv6 preference (`ForceFamily`) and timeouts.
- `ddnsclient.tlsconn` – `SecureConnection` and `TlsSettings`, an optional
  TLS layer with certificate verification, SNI and a custom CA bundle.
- `ddnsclient.http` – `HttpClient`, `parse_response()` and `check_status()`
  for simple request/response exchanges with DDNS servers.
- `ddnsclient.plugin` – `Provider` and `PluginRegistry`, a registry of DDNS
  providers with exact and substring lookup and automatic IPv6 clones.
- `ddnsclient.osutil` – running hook scripts (`shell_execute`), signal
  handling (`SignalHandler`, `Command`), PID-file checks and cache-directory
  permission checks.
- `ddnsclient.b64`, `ddnsclient.digest` – base64 and MD5/SHA-1 helpers used
  for provider authentication.
- `ddnsclient.jsmn`, `ddnsclient.jsonhelpers` – a minimal JSON tokenizer and
  helpers for picking values out of provider responses.
- `ddnsclient.logger`, `ddnsclient.errors`, `ddnsclient.compat` – logging,
  error codes (`ErrorCode`, `DdnsError`) and small utilities.

## Installation

```
pip install .
```

Python 3.10 or later is required; there are no third-party dependencies.

## Example

```python
from ddnsclient.http import HttpClient, check_status
from ddnsclient.plugin import PluginRegistry, Provider

registry = PluginRegistry(None)
registry.register(
    Provider(
        name="default@example.com",
        checkip_name="checkip.example.com",
        checkip_url="/",
        server_name="update.example.com",
        server_url="/nic/update",
    ),
    "GET %s HTTP/1.0\r\nHost: %s\r\nUser-Agent: %s\r\n\r\n",
)

provider = registry.find("example.com", True)
request = b"GET / HTTP/1.0\r\nHost: checkip.example.com\r\n\r\n"

with HttpClient(provider.checkip_name, 80, False, 10000, None) as client:
    response = client.transaction(request, 8192)
    check_status(response.status)
    print(response.body)
```

Errors are reported as `DdnsError` exceptions carrying an `ErrorCode`.

## Running the tests

```
pip install .[test]
pytest
```