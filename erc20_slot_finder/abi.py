from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3


def get_function_selector(function_signature: str) -> bytes:
    """Get 4-byte function selector from signature"""
    return Web3.keccak(text=function_signature)[:4]


BALANCE_OF_SELECTOR = get_function_selector("balanceOf(address)")


def encode_balance_of(holder: str) -> bytes:
    return BALANCE_OF_SELECTOR + encode(['address'], [holder])


def decode_uint256(output: bytes) -> int:
    """Decode a uint256 return value; anything undecodable reads as zero"""
    try:
        (value,) = decode(['uint256'], output)
    except (DecodingError, ValueError, TypeError):
        return 0
    return value
