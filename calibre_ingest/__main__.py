from calibre_ingest.main import run

run()
