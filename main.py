from rich.pretty import pprint

from argtree import *

tool = Command("tool", output=ConsoleOutput(fancy=True), formatter=HelpFormatter())
tool.add_options(
    OptionSpec("verbose", ValueKind.BOOL, False, short="v", help="print more details."),
    OptionSpec("tag", ValueKind.STRING_ARRAY, (), append=True, min_args=1, max_args=1, help="attach a tag, repeatable."),
)
tool.add_positional(ArgSpec("files", ValueKind.STRING_ARRAY, min_args=1, help="files to process."))

build = Command("build")
build.add_option(OptionSpec("jobs", ValueKind.INT, 1, short="j", help="number of parallel jobs."))
tool.add_subcommand(build)


if __name__ == '__main__':
    pprint(tool)
    if outcome := invoke(tool):
        pprint(outcome.result)
