import json
import typer
import uvicorn
from trade_indexer.config.settings import API_HOST, API_PORT
from trade_indexer.main import create_app
from trade_indexer.sources.decoder.decode_transaction_input import decode_transaction_input

app = typer.Typer(help="Index pool trades from the chain and serve them live")


@app.command("index")
def index(
    host: str = typer.Option(API_HOST, help="Bind address for the API"),
    port: int = typer.Option(API_PORT, help="Port for the API"),
):
    """
    Scan new blocks and serve history + live updates from one process.
    """
    uvicorn.run(create_app("index"), host=host, port=port, log_config=None)


@app.command("serve")
def serve(
    host: str = typer.Option(API_HOST, help="Bind address for the API"),
    port: int = typer.Option(API_PORT, help="Port for the API"),
):
    """
    Serve the API only; live updates come from tailing the store.
    """
    uvicorn.run(create_app("serve"), host=host, port=port, log_config=None)


@app.command("decode")
def decode(call_data: str = typer.Argument(..., help="0x-prefixed transaction input")):
    """Print the decoded function name and params as JSON."""
    typer.echo(json.dumps(decode_transaction_input(call_data).to_dict(), indent=2, default=str))


if __name__ == "__main__":
    app()
