"""Click option helpers for mutually exclusive actions."""
import click


def _check_exclusive(name: str, exclusive_with: list[str], opts: dict) -> None:
    """Raise UsageError if an option is combined with one it excludes.

    Args:
        name: Name of the current option.
        exclusive_with: Names of the options it cannot be combined with.
        opts: Dictionary of parsed options.

    Raises:
        click.UsageError: If a conflicting option is present.
    """
    for other in exclusive_with:
        if opts.get(other):
            msg = f"Options --{name} and --{other} are mutually exclusive"
            raise click.UsageError(msg)


class MutuallyExclusiveOption(click.Option):
    """Click flag that cannot be combined with the flags it names."""

    def __init__(self, *args, **kwargs):
        """Initialize with exclusive_with naming the conflicting options."""
        self.exclusive_with = kwargs.pop("exclusive_with", [])
        super().__init__(*args, **kwargs)

    def handle_parse_result(self, ctx, opts, args):
        """Check exclusivity before normal processing."""
        if opts.get(self.name):
            _check_exclusive(self.name, self.exclusive_with, opts)
        return super().handle_parse_result(ctx, opts, args)
