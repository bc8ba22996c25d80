from ami_uploader.cli.__main__ import app

app()
