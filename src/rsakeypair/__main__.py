"""The Command Line Interface for the key pair primitive, including Interactive elements.

A hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface) that asks for whatever the command
line left out, unless told not to with `--non-interactive`. Keys are stored in the plain text format of
`rsakeypair.serialization`.

Typical usage example:

    rsakeypair keygen --keysize 2048 -p key.pub -P key
    rsakeypair -n apply -k key.pub --value 41
    OR
    python -m rsakeypair
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import pathlib
import sys
import typing

import rsakeypair


def hex_int(text: str) -> int:
    """Parse a non-negative hex number, with or without 0x."""
    value = int(text, 16)
    if value < 0:
        raise ValueError("Value must not be negative.")
    return value


def seed_list(text: str) -> tuple[int, ...]:
    """Parse comma separated integer seeds."""
    return tuple(int(part) for part in text.split(",") if part.strip())


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Callable = str
    choices: list[str] | None = None
    default: typing.Any = None
    advanced: bool = False


help_dict: dict[str, HelpData] = {
    "subcommand":
        HelpData(
            description="The available subcommands in rsakeypair.",
            choices=["keygen", "apply"],
        ),
    "keygen":
        HelpData("Key pair generation utility."),
    "apply":
        HelpData("Applies a key to a hex value. Encrypts or decrypts depending on the key."),
    "public_key":
        HelpData(
            description="Location of the public key file.",
            format=pathlib.Path,
        ),
    "private_key":
        HelpData(
            description="Location of the private key file.",
            format=pathlib.Path,
        ),
    "key":
        HelpData(
            description="Location of the key file to apply.",
            format=pathlib.Path,
        ),
    "value":
        HelpData(
            description="Value to transform, in hex. Must be smaller than the modulus unless --blocks is used.",
            format=hex_int,
        ),
    "keysize":
        HelpData(
            description="Key size (in bits).",
            choices=["256", "512", "1024", "2048", "3072", "4096"],
            default="2048",
        ),
    "seeds":
        HelpData(
            description="Comma separated integers to seed generation with. Same seeds, same keys.",
            format=seed_list,
            advanced=True,
            default=(),
        ),
    "blocks":
        HelpData(
            description="Split values larger than the modulus into blocks?",
            choices=["Y", "N"],
            advanced=True,
            default="N",
        ),
    "overwrite":
        HelpData(
            description="Overwrite specified destination files if they exist?",
            choices=["Y", "N"],
            default="N",
        )
}

needs = {
    "keygen": ("public_key", "private_key", "keysize", "seeds"),
    "apply": ("key", "value", "blocks"),
}

corep = argparse.ArgumentParser(prog="rsakeypair")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsakeypair.__version__}")
corep.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
corep.add_argument("--advanced", "-a", action="store_true", help="Enable advanced mode, for interactive mode")
corep.add_argument("--verbose", action="store_true", help="Log key generation details")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

keygen = commands.add_parser("keygen", help=help_dict["keygen"].description)
keygen.add_argument("--public_key", "-p", type=help_dict["public_key"].format, help=help_dict["public_key"].description)
keygen.add_argument("--private_key",
                    "-P",
                    type=help_dict["private_key"].format,
                    help=help_dict["private_key"].description)
keygen.add_argument("--keysize", choices=help_dict["keysize"].choices, help=help_dict["keysize"].description)
keygen.add_argument("--seeds", "-s", type=help_dict["seeds"].format, help=help_dict["seeds"].description)
keygen.add_argument("--overwrite", "-o", action="store_const", const="Y", help=help_dict["overwrite"].description)

apply = commands.add_parser("apply", help=help_dict["apply"].description)
apply.add_argument("--key", "-k", type=help_dict["key"].format, help=help_dict["key"].description)
apply.add_argument("--value", type=help_dict["value"].format, help=help_dict["value"].description)
apply.add_argument("--blocks", "-b", action="store_const", const="Y", help=help_dict["blocks"].description)


def checkmodes(arg: str, mode: tuple[bool, bool]):
    helper_data = help_dict[arg]
    if (mode[0] or (helper_data.advanced and not mode[1])) and helper_data.default is not None:
        return helper_data.default
    if mode[0]:
        raise IOError(f"Argument {arg} is missing and non-interactive mode is active.")
    return helper_data


def choice_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    choices = helper_data.choices
    vald = set(choices)
    for choice in choices:
        defstring = " (Default)" if choice == helper_data.default else ""
        if help_dict.get(choice, None):
            prntr(f"{choice} - {help_dict[choice].description}" + defstring)
        else:
            prntr(f"{choice}" + defstring)
    if helper_data.default is not None:
        prntr("To accept default just click enter. Otherwise specify value.")
    while True:
        ch = input(f"{arg}: ")
        if ch in vald:
            return ch
        if not ch and helper_data.default is not None:
            return helper_data.default
        prntr("Please select an option from the list.")


def input_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    if helper_data.default is not None:
        prntr(f"Default value: {helper_data.default}")
        prntr("To accept default just click enter. Otherwise specify value.")
    cls = helper_data.format
    while True:
        ch = input(f"{arg}: ")
        if not ch and helper_data.default is not None:
            return helper_data.default
        if ch == "":
            prntr("Please provide a value.")
            continue
        try:
            return cls(ch)
        except ValueError:
            prntr(f"We could not convert your value to {getattr(cls, '__name__', 'the expected type')}.")


def read_key(file: pathlib.Path) -> rsakeypair.KeyMaterial:
    """Read a key in text format from file."""
    with open(file, "r", encoding="ascii") as f:
        return rsakeypair.from_string(f.read())


def write_key(file: pathlib.Path, key: rsakeypair.KeyMaterial) -> None:
    """Write a key in text format to file."""
    with open(file, "w", encoding="ascii") as f:
        f.write(rsakeypair.to_string(key) + "\n")


def main(argv: list[str] | None = None) -> None:
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = corep.parse_args(argv)
    pstatus = (args.non_interactive, args.advanced)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not pstatus[0]:
            print(text)

    pspr("Welcome to rsakeypair!\n")
    if not args.subcommand:
        args.subcommand = choice_handler("subcommand", pstatus)
    for reqs in needs[args.subcommand]:
        if getattr(args, reqs, None) is None:
            if help_dict[reqs].choices is not None:
                res = choice_handler(reqs, pstatus)
            else:
                res = input_handler(reqs, pstatus)
            setattr(args, reqs, res)
        else:
            pspr(f"{reqs}: {getattr(args, reqs)}")
    pspr("\nInput Complete! Executing...")
    match args.subcommand:
        case "keygen":
            if args.private_key.exists() or args.public_key.exists():
                rs = getattr(args, "overwrite", None)
                if rs is None:
                    rs = choice_handler("overwrite", pstatus, pspr)
                if rs == "N":
                    print("Destination private or public key already exists!")
                    return
            pub, priv = rsakeypair.create_key_pair(int(args.keysize), args.seeds)
            write_key(args.private_key, priv)
            write_key(args.public_key, pub)
            pspr("\nKey pair generated!")
        case "apply":
            key = read_key(args.key)
            transform = rsakeypair.apply_to_value if args.blocks == "Y" else rsakeypair.apply
            result = transform(key, args.value)
            if not result.success:
                print(f"Could not apply key from {args.key}, it is not a valid key.", file=sys.stderr)
                sys.exit(1)
            pspr("Result:")
            print(f"{result.value:x}")
    pspr("Thank you for using rsakeypair!")
    pspr("Goodbye!")


if __name__ == "__main__":
    main()
