# con_reflection_relay.py
I = importlib

relay_owner = Variable()

reflection_interface = [
    I.Func('claim_reflections', args=('address',)),
    I.Func('pending_reflections', args=('address',)),
    I.Func('release', args=()),
]

@construct
def seed():
    relay_owner.set(ctx.caller)

def load_token(token_contract_name: str):
    token_contract = I.import_module(token_contract_name)
    assert I.enforce_interface(token_contract, reflection_interface), 'token contract does not expose reflections'
    return token_contract

# Claims twice inside the same call chain; the second claim must pay nothing
@export
def claim_twice(token_contract_name: str, address: str):
    assert ctx.caller == relay_owner.get(), "Only owner can relay claims."
    token_contract = load_token(token_contract_name)

    first = token_contract.claim_reflections(address=address)
    second = token_contract.claim_reflections(address=address)
    return [first, second]

# This contract (ctx.this) becomes ctx.caller for the token's release()
@export
def relay_release(token_contract_name: str):
    assert ctx.caller == relay_owner.get(), "Only owner can relay releases."
    token_contract = load_token(token_contract_name)
    return token_contract.release()
