from rich.pretty import pprint

from argspan import *

__prog__ = "demo"

parser = Parser(shell=True)

build = parser.command("build", "b", "build a target")
build.flag("verbose", "v", max=3)
build.flag("force", "f")
build.argument("target", "t", "NAME", required=True)
build.argument("jobs", "j", "N", validator=str.isdigit, default="1")

parser.set_global_command(Command("main", flags=[Flag("version", "V")]))


if __name__ == '__main__':
    pprint(parser)
    pprint(parser.parse())
