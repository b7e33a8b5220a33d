"""ABI loading from the bundled JSON files.

Bundled files live in `eth_locker/abi/` and carry only the functions the locker calls.
"""

import json
from functools import lru_cache
from pathlib import Path

from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract


@lru_cache(maxsize=32)
def get_abi_by_filename(fname: str) -> list[dict]:
    """Reads an embedded ABI file and returns the ABI entries.

    Example::

        abi = get_abi_by_filename("YearnV3Vault.json")

    Loaded ABI files are cached in in-process memory.

    :param fname:
        JSON filename in the `abi` folder of this package
    """
    here = Path(__file__).resolve().parent
    abi_path = here / "abi" / Path(fname)
    with open(abi_path, "rt", encoding="utf-8") as f:
        contract_interface = json.load(f)

    if type(contract_interface) == list:
        # Etherscan copy-paste
        return contract_interface
    return contract_interface["abi"]


def get_deployed_contract(
    web3: Web3,
    fname: str,
    address: HexAddress | str,
) -> Contract:
    """Get a Contract proxy object for a contract deployed at a specific address.

    :param fname:
        Bundled ABI file name

    :param address:
        Address of the deployed contract, any case
    """
    assert address, "get_deployed_contract() address was None"
    address = Web3.to_checksum_address(address)
    return web3.eth.contract(address=address, abi=get_abi_by_filename(fname))
