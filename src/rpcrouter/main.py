
from rpcrouter.server.registry import RouteTable

settings = {
    "host": "127.0.0.1",
    "port": 8000,
    "mount_path": "/jsonrpc",
}

rpc = RouteTable(
    name="rpc",
    settings=settings,
)

# --- Register example methods ------------------------------------------------
@rpc.register("ping")
def ping() -> str:
    return "pong"

@rpc.register("add", path="/math", annotation="Add two numbers.")
def add(a: int, b: int) -> int:
    return a + b

@rpc.register("divide", path="/math", annotation="Divide two numbers.")
def divide(a: float, b: float) -> float:
    return a / b

rpc.annotate_route("/math", "Arithmetic")

if __name__ == "__main__":
    rpc.run(host="127.0.0.1", port=8001)
