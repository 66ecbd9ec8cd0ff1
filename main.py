from rich.pretty import pprint

from callopt import *

parser = OptionParser("cc")
parser.banner.write("cc: a pretend compiler driver\n")
parser.add_help()
settings = {"verbose": False, "debug": False, "outfile": "a.out", "includes": []}


@parser.on("-v", "--verbose", descr="toggle verbose")
def verbose():
    settings["verbose"] = True


@parser.on("-d", "--debug", "/debug", descr="toggle debug mode")
def debug():
    settings["debug"] = True


@parser.on("-o?", "--out=?", "/out:?", descr="set output file")
def outfile(value):
    settings["outfile"] = str(value)


parser.on("-I?", "--include=?", descr="add a path to the include search path", callback=settings["includes"].append)
parser.on_unknown(lambda token: not token.startswith("-W"))
parser.stop_if(stop_after_positional)


if __name__ == '__main__':
    if not (files := invoke(parser)):
        parser.print_help()
        raise SystemExit(1)
    pprint({"settings": settings, "positionals": files})
