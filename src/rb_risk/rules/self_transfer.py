from src.rb_common.errors import SelfTransferError


def check_not_self_transfer(from_user: str, to_user: str) -> None:
    if from_user == to_user:
        raise SelfTransferError()
