from rich.pretty import pprint

from argsmith import *

parser = Parser(descr="render the current scene", shell=True)
parser.add_options(
    string("filename", "f", required=True, default="temp", descr="output file name"),
    integer("width", "W", default=960, descr="output width"),
    integer("height", "ht", required=True, default=540, descr="output height"),
    integer("samples", "s", "ns", required=True, default=10, descr="render samples"),
    path("scene", descr="scene file to render"),
    boolean("debug", "d", descr="print the parser state"),
)


if __name__ == '__main__':
    values = parser.parse()
    if values["debug"]:
        parser.dump()
    parser.validate()
    pprint(dict(values))
