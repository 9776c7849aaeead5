from restgate.server import run

run()
