"""Pytest configuration and fixtures."""

import base64
import hashlib
import json
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from mvx_agent.config import (
    AccessConfig,
    AgentConfig,
    HatomConfig,
    IntegrationsConfig,
    QRCodeConfig,
    StorageConfig,
    WalletConfig,
    WatcherConfig,
)
from mvx_agent.extraction import StaticIntentExtractor
from mvx_agent.plugin import MultiversXPlugin
from mvx_agent.services import QRCodeService
from mvx_agent.wallet.client import MultiversXApiClient
from mvx_agent.wallet.credential import Credential
from mvx_agent.wallet.networks import NETWORKS

# MultiversX test wallets (alice and bob), never funded on mainnet
ALICE_SECRET = "413f42575f7f26fad3317a778771212fdb80245850981e48b58a4f25e344e8f9"
BOB_SECRET = "b8ca6f8203fb4b545a8e83c5384da033c415db155b53fb5b8eba7ff5a039d639"
ALICE_ADDRESS = Credential.from_string(ALICE_SECRET).address
BOB_ADDRESS = Credential.from_string(BOB_SECRET).address
# stand-ins for the Hatom contracts, any valid address will do
MARKET_ADDRESS = Credential.from_string("11" * 32).address
CONTROLLER_ADDRESS = Credential.from_string("22" * 32).address

DEVNET = NETWORKS["devnet"]
QR_API = "https://qr.test"


class FakeNetwork:
    """In-memory stand-in for the MultiversX API, served via MockTransport.

    Attributes tweak its behavior:

    * ``reject_with``: refuse every POST /transactions with this message
    * ``fail_with``: accept, then report the transaction failed with this reason
    * ``resolve``: when False, accepted transactions stay pending forever
    * ``lose_answer``: accept the transaction, then answer the POST with a
      read timeout (``"timeout"``) or an unreadable body (``"garbled"``)
    """

    def __init__(self, balance: int = 10 * 10**18, nonce: int = 7):
        self.accounts: dict[str, dict] = {}
        self.default_balance = balance
        self.default_nonce = nonce
        self.tokens: dict[str, int] = {"USDC-c76f1f": 6}
        self.sent: list[dict] = []
        self.statuses: dict[str, dict] = {}
        self.requests: list[tuple[str, str]] = []
        self.reject_with: str | None = None
        self.fail_with: str | None = None
        self.resolve = True
        self.lose_answer: str | None = None

    @property
    def send_count(self) -> int:
        return sum(1 for method, path in self.requests if method == "POST")

    def account(self, address: str) -> dict:
        return self.accounts.setdefault(
            address, {"nonce": self.default_nonce, "balance": self.default_balance}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))

        if request.method == "GET" and path.startswith("/accounts/"):
            address = path.rsplit("/", 1)[1]
            acct = self.account(address)
            return httpx.Response(
                200,
                json={"address": address, "nonce": acct["nonce"], "balance": str(acct["balance"])},
            )

        if request.method == "GET" and path.startswith("/tokens/"):
            identifier = path.rsplit("/", 1)[1]
            if identifier not in self.tokens:
                return httpx.Response(404, json={"message": "Token not found"})
            return httpx.Response(200, json={"identifier": identifier, "decimals": self.tokens[identifier]})

        if request.method == "POST" and path == "/transactions":
            if self.reject_with:
                return httpx.Response(400, json={"error": self.reject_with, "statusCode": 400})
            body = json.loads(request.content)
            tx_hash = hashlib.sha256(request.content).hexdigest()
            self.sent.append(body)
            if self.resolve:
                if self.fail_with:
                    self.statuses[tx_hash] = {
                        "status": "fail",
                        "operations": [{"action": "signalError", "message": self.fail_with}],
                    }
                else:
                    self.statuses[tx_hash] = {"status": "success"}
            else:
                self.statuses[tx_hash] = {"status": "pending"}
            if self.lose_answer == "timeout":
                raise httpx.ReadTimeout("read timed out", request=request)
            if self.lose_answer == "garbled":
                return httpx.Response(200, text="<html>upstream ok</html>")
            return httpx.Response(200, json={"txHash": tx_hash, "receiver": body["receiver"]})

        if request.method == "GET" and path.startswith("/transactions/"):
            tx_hash = path.rsplit("/", 1)[1]
            if tx_hash not in self.statuses:
                return httpx.Response(404, json={"message": "Transaction not found"})
            return httpx.Response(200, json={"txHash": tx_hash, **self.statuses[tx_hash]})

        return httpx.Response(404, json={"message": f"no route for {request.method} {path}"})

    def decoded_data(self, index: int = -1) -> str:
        return base64.b64decode(self.sent[index]["data"]).decode("utf-8")


class FakeQRApi:
    """QR service backend: returns a preview path, or fails when ``broken``."""

    def __init__(self):
        self.broken = False
        self.encoded: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.broken:
            return httpx.Response(503, text="Service Unavailable")
        self.encoded.append(request.url.params["data"])
        return httpx.Response(200, json={"preview_url": f"/static/qr_{len(self.encoded)}.png"})


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def qr_api() -> FakeQRApi:
    return FakeQRApi()


@pytest_asyncio.fixture
async def http_client(network: FakeNetwork):
    client = httpx.AsyncClient(transport=httpx.MockTransport(network.handler), base_url=DEVNET.api_url)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def api_client(http_client: httpx.AsyncClient) -> MultiversXApiClient:
    return MultiversXApiClient(DEVNET, client=http_client)


@pytest_asyncio.fixture
async def qrcode(qr_api: FakeQRApi):
    client = httpx.AsyncClient(transport=httpx.MockTransport(qr_api.handler))
    yield QRCodeService(QR_API, client=client)
    await client.aclose()


def make_config(
    tmp_path: Path, allowed=("u1",), storage: bool = True, hatom: HatomConfig | None = None
) -> AgentConfig:
    return AgentConfig(
        wallet=WalletConfig(private_key=ALICE_SECRET, network="devnet"),
        access=AccessConfig(allowed_users=list(allowed)),
        watcher=WatcherConfig(poll_interval_seconds=0, max_attempts=3, timeout_seconds=5),
        integrations=IntegrationsConfig(
            qrcode=QRCodeConfig(api_url=QR_API), hatom=hatom or HatomConfig()
        ),
        storage=StorageConfig(enabled=storage, path=str(tmp_path / "journal.db")),
    )


@pytest_asyncio.fixture
async def build_plugin(tmp_path: Path, http_client: httpx.AsyncClient, qrcode: QRCodeService):
    """Factory: ``await build_plugin({"receiver": ..., "amount": ...})``."""
    plugins: list[MultiversXPlugin] = []

    async def _build(values: dict | None = None, **config_overrides) -> MultiversXPlugin:
        config = make_config(tmp_path, **config_overrides)
        plugin = await MultiversXPlugin.build(
            config,
            tmp_path,
            http_client=http_client,
            extractor=StaticIntentExtractor(values),
            qrcode=qrcode,
        )
        plugins.append(plugin)
        return plugin

    yield _build
    for plugin in plugins:
        await plugin.aclose()
