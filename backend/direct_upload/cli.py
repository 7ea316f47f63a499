"""Direct upload CLI."""

import asyncio
import json

import click

from direct_upload.client import UploadClient, UploadError

service_url_option = click.option(
    "--service-url",
    envvar="UPLOAD_SERVICE_URL",
    required=True,
    help="Base URL of the signing service",
)
uploads_path_option = click.option(
    "--uploads-path",
    envvar="UPLOADS_PATH",
    default="/uploads",
    show_default=True,
    help="Path of the signing endpoint",
)
token_option = click.option(
    "--token",
    envvar="UPLOAD_TOKEN",
    default=None,
    help="Bearer token for the signing endpoint",
)


@click.group()
def cli():
    """Direct upload - sign and push files straight to the object store."""
    pass


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@service_url_option
@uploads_path_option
@token_option
@click.option(
    "--content-type",
    envvar="UPLOAD_CONTENT_TYPE",
    default="image/jpeg",
    show_default=True,
    help="MIME type the service signs for",
)
@click.option(
    "--max-bytes",
    envvar="MAX_UPLOAD_BYTES",
    type=int,
    default=1_000_000,
    show_default=True,
    help="Largest file accepted before upload",
)
def push(file, service_url, uploads_path, token, content_type, max_bytes):
    """Upload FILE and print the URL of the stored object."""

    async def _push() -> str:
        async with UploadClient(
            service_url,
            uploads_path=uploads_path,
            content_type=content_type,
            max_upload_bytes=max_bytes,
            token=token,
        ) as client:
            selected = client.select_path(file)
            return await client.upload(selected)

    try:
        url = asyncio.run(_push())
    except UploadError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(url)


@cli.command()
@service_url_option
@uploads_path_option
@token_option
def presign(service_url, uploads_path, token):
    """Request an upload URL and print the signing response."""

    async def _presign():
        async with UploadClient(service_url, uploads_path=uploads_path, token=token) as client:
            return await client.request_signing()

    try:
        signed = asyncio.run(_presign())
    except UploadError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(signed.model_dump(by_alias=True), indent=2))


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the signing service."""
    import uvicorn

    uvicorn.run("direct_upload.main:app", host=host, port=port, reload=reload)


def main():
    cli()


if __name__ == "__main__":
    main()
