import pytest

from rpcrouter.server.registry import RouteTable


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def calc_table():
    """A small table with base methods and two routes."""
    table = RouteTable(name="calc")

    @table.register("ping")
    def ping():
        return "pong"

    @table.register("add", path="/math")
    def add(a: int, b: int) -> int:
        return a + b

    @table.register("divide", path="/math")
    async def divide(a: int, b: int) -> float:
        return a / b

    @table.register("nothing", path="/math")
    def nothing():
        return None

    @table.register("fail", path="/broken")
    def fail():
        raise RuntimeError("boom")

    table.annotate_route("/math", "Arithmetic")
    return table
