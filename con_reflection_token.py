balances = Hash(default_value=0)
metadata = Hash()
tax = Hash()
excluded = Hash(default_value=False)
reflection = Hash()
last_claim = Hash()
vesting = Hash()

claim_guard = Variable(default_value=False)
release_guard = Variable(default_value=False)

TOTAL_SUPPLY = 1000000
VESTING_PERCENT = 10
BASIS_POINTS = 10000
TAX_RATE = 150 # 1.5% of every taxed transfer
DEVELOPER_SHARE = 5000 # share of the tax, basis points
REFLECTION_SHARE = 5000

# (minimum days held, rate); rate is later divided by 100
REFLECTION_RATES = [(365, 20), (180, 16), (90, 12), (30, 8), (7, 4), (1, 2)]

VESTING_QUARTER_DAYS = 180 # 24 months of 30 days, released in four steps
VESTING_QUARTERS = 4

ZERO_ADDRESS = '0' * 64
BURN_ADDRESS = '0' * 60 + 'dead'
EDITABLE_METADATA = ['token_name', 'token_symbol', 'token_logo_url', 'token_website']

Transfer = LogEvent(
    event="Transfer",
    params={
        "from": {'type': str, 'idx': True},
        "to": {'type': str, 'idx': True},
        "amount": {'type': (int, float, decimal)}
    })

Approve = LogEvent(
    event="Approve",
    params={
        "from": {'type': str, 'idx': True},
        "to": {'type': str, 'idx': True},
        "amount": {'type': (int, float, decimal)}
    })

TokensReleased = LogEvent(
    event="TokensReleased",
    params={
        "beneficiary": {'type': str, 'idx': True},
        "amount": {'type': (int, float, decimal)}
    })

DeveloperAddressChanged = LogEvent(
    event="DeveloperAddressChanged",
    params={
        "new_address": {'type': str, 'idx': True},
        "timestamp": {'type': str, 'idx': False}
    })

@construct
def seed(developer: str, vesting_releaser: str):
    assert DEVELOPER_SHARE + REFLECTION_SHARE == BASIS_POINTS, 'Tax shares must add up to 100%!'

    metadata['token_name'] = "REFLECTION TOKEN"
    metadata['token_symbol'] = "RFT"
    metadata['total_supply'] = TOTAL_SUPPLY
    metadata['operator'] = ctx.caller
    metadata['developer'] = developer
    metadata['vesting_releaser'] = vesting_releaser

    tax['rate'] = TAX_RATE
    tax['developer_share'] = DEVELOPER_SHARE
    tax['reflection_share'] = REFLECTION_SHARE

    allocation = TOTAL_SUPPLY * VESTING_PERCENT // 100
    balances[ctx.caller] = TOTAL_SUPPLY - allocation
    balances[ctx.this] = allocation

    vesting['allocation'] = allocation
    vesting['cliff'] = now
    vesting['released'] = 0

    reflection['pool'] = 0
    reflection['last_update'] = now

    # The contract never accrues reflections on its own balance, see reflections_due()
    for account in [ctx.caller, developer, vesting_releaser, ctx.this]:
        excluded[account] = True

    claim_guard.set(False)
    release_guard.set(False)

def add_balance(account: str, amount: int):
    balances[account] += amount

def subtract_balance(account: str, amount: int):
    balance = balances[account]
    assert balance >= amount, f'Insufficient balance for {account}!'
    balances[account] = balance - amount

def raw_transfer(sender: str, recipient: str, amount: int):
    if amount == 0:
        return

    assert balances[sender] >= amount, f'Insufficient balance for sender {sender}!'
    subtract_balance(sender, amount)
    add_balance(recipient, amount)

    Transfer({"from": sender, "to": recipient, "amount": amount})

def update(sender: str, recipient: str, amount: int):
    # Pending reflections are paid on pre-transfer balances, before any value moves
    settle(sender)
    settle(recipient)

    if excluded[sender] or excluded[recipient]:
        raw_transfer(sender, recipient, amount)
        return

    tax_amount = amount * tax['rate'] // BASIS_POINTS
    developer_cut = tax_amount * tax['developer_share'] // BASIS_POINTS
    reflection_cut = tax_amount * tax['reflection_share'] // BASIS_POINTS

    raw_transfer(sender, recipient, amount - tax_amount)
    raw_transfer(sender, ctx.this, reflection_cut)
    raw_transfer(sender, metadata['developer'], developer_cut)

    reflection['pool'] += reflection_cut
    reflection['last_update'] = now

def reflection_rate(elapsed: datetime.timedelta):
    for days, rate in REFLECTION_RATES:
        if elapsed >= datetime.DAYS * days:
            return rate
    return 0

def reflections_due(account: str):
    if account == ctx.this:
        return 0

    since = last_claim[account]
    if since is None:
        since = reflection['last_update']

    rate = reflection_rate(now - since)
    if rate == 0:
        return 0

    return rate * balances[account] * reflection['pool'] // (metadata['total_supply'] * 100)

def settle(account: str):
    if account == ctx.this:
        return 0

    amount = reflections_due(account)
    reflection['pool'] -= amount
    last_claim[account] = now

    if amount > 0:
        update(ctx.this, account, amount)

    return amount

@export
def transfer(amount: int, to: str):
    assert amount > 0, 'Cannot transfer zero or negative!'
    sender = ctx.caller
    assert balances[sender] >= amount, f'Insufficient balance for sender {sender}!'

    update(sender, to, amount)

@export
def approve(amount: int, to: str):
    assert amount >= 0, 'Cannot approve negative!'
    balances[ctx.caller, to] = amount
    Approve({"from": ctx.caller, "to": to, "amount": amount})

@export
def transfer_from(amount: int, to: str, main_account: str):
    assert amount > 0, 'Cannot transfer zero or negative!'
    spender = ctx.caller

    allowance = balances[main_account, spender]
    assert allowance >= amount, \
        f'Transfer amount {amount} exceeds allowance {allowance} for {main_account} by spender {spender}!'
    assert balances[main_account] >= amount, f'Insufficient balance for main_account {main_account}!'

    balances[main_account, spender] = allowance - amount
    update(main_account, to, amount)

@export
def balance_of(address: str):
    return balances[address]

@export
def allowance(owner: str, spender: str):
    return balances[owner, spender]

@export
def total_supply():
    return metadata['total_supply']

@export
def is_excluded(address: str):
    return excluded[address]

@export
def claim_reflections(address: str):
    assert not claim_guard.get(), 'Reflection claim is busy, please try again.'
    claim_guard.set(True)

    amount = settle(address)

    claim_guard.set(False)
    return amount

@export
def pending_reflections(address: str):
    return reflections_due(address)

@export
def reflection_pool():
    return reflection['pool']

@export
def vested_amount():
    elapsed = now - vesting['cliff']
    for quarters in range(VESTING_QUARTERS, 0, -1):
        if elapsed >= datetime.DAYS * (VESTING_QUARTER_DAYS * quarters):
            return vesting['allocation'] * quarters // VESTING_QUARTERS
    return 0

@export
def releasable_amount():
    return vested_amount() - vesting['released']

@export
def release():
    assert not release_guard.get(), 'Vesting release is busy, please try again.'
    release_guard.set(True)

    beneficiary = metadata['vesting_releaser']
    assert ctx.caller == beneficiary, 'Only the vesting releaser can release tokens!'

    amount = releasable_amount()
    assert amount > 0, 'No tokens are due for release!'

    vesting['released'] += amount
    update(ctx.this, beneficiary, amount)

    TokensReleased({"beneficiary": beneficiary, "amount": amount})

    release_guard.set(False)
    return amount

@export
def set_developer_address(address: str):
    assert ctx.caller == metadata['operator'], 'Only operator can set the developer address!'
    assert address, 'Invalid developer address: empty!'
    assert address != ZERO_ADDRESS and address != BURN_ADDRESS, \
        'Invalid developer address: zero or burn address!'
    assert not address.startswith('con_'), 'Invalid developer address: contracts are not allowed!'

    # Exclusion membership of the old and new developer is left as is
    metadata['developer'] = address

    DeveloperAddressChanged({"new_address": address, "timestamp": str(now)})

@export
def change_metadata(key: str, value: Any):
    assert ctx.caller == metadata['operator'], 'Only operator can set metadata!'
    assert key in EDITABLE_METADATA, f'Metadata key {key} cannot be changed!'
    metadata[key] = value
