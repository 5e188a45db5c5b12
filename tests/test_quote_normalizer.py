from modules.shipping_quote.quote_normalizer import cheapest, combine, normalize
from shipping_partner.kurasi.kurasi_schema import RawQuoteResponse

from .kurasi_fakes import quote_block, quote_body


def raw(**blocks):
    return RawQuoteResponse.model_validate(quote_body(**blocks)["data"])


def codes(lines):
    return [line.service_code for line in lines]


def test_normalize_always_returns_the_four_services():
    lines = normalize(raw(esr=quote_block(50000)))

    assert len(lines) == 4
    assert sorted(codes(lines)) == ["EP", "ES", "EX", "PP"]


def test_available_lines_first_by_price_then_catalog_order():
    lines = normalize(
        raw(
            esr=quote_block(70000),
            epr=quote_block(None),
            err=quote_block(40000),
        )
    )

    assert codes(lines) == ["EX", "ES", "EP", "PP"]
    assert [line.available for line in lines] == [True, True, False, False]
    assert lines[2].total_fee_minor is None
    assert lines[3].carrier_fee_minor is None


def test_missing_null_and_zero_blocks_differ():
    lines = {
        line.service_code: line
        for line in normalize(raw(esr=None, epr=quote_block(None), err=quote_block(0)))
    }

    assert lines["ES"].available is False
    assert lines["ES"].max_weight_label is None
    assert lines["EP"].available is False
    assert lines["EP"].max_weight_label == "30 kg"
    assert lines["EX"].available is True
    assert lines["EX"].total_fee_minor == 0


def test_local_fee_is_added_to_every_available_line():
    lines = normalize(raw(esr=quote_block(50000), ppr=quote_block(55000)), 5000)

    assert [(l.service_code, l.total_fee_minor) for l in lines if l.available] == [
        ("ES", 55000),
        ("PP", 60000),
    ]
    assert lines[0].carrier_fee_minor == 50000
    assert lines[0].local_fee_minor == 5000


def test_cheapest_breaks_ties_by_service_code():
    lines = normalize(
        raw(esr=quote_block(60000), epr=quote_block(60000), ppr=quote_block(60000))
    )

    assert cheapest(lines).service_code == "EP"
    assert codes(lines)[:3] == ["EP", "ES", "PP"]


def test_cheapest_of_nothing_is_none():
    assert cheapest(normalize(raw())) is None
    assert cheapest([]) is None


def test_combine_keeps_only_available_services():
    lines = combine(
        raw(
            esr=quote_block(50000),
            epr=quote_block(60000),
            err=quote_block(90000),
            ppr=quote_block(55000),
        ),
        5000,
    )

    assert [(l.service_code, l.total_fee_minor) for l in lines] == [
        ("ES", 55000),
        ("PP", 60000),
        ("EP", 65000),
        ("EX", 95000),
    ]


def test_combine_with_no_priced_service_is_empty():
    assert combine(raw(esr=quote_block(None), err=quote_block(None)), 10000) == []


def test_fractional_carrier_amount_rounds_to_minor_units():
    lines = normalize(raw(esr=quote_block(50000.6)))
    assert lines[0].carrier_fee_minor == 50001


def test_same_quote_gives_the_same_lines():
    quote = raw(esr=quote_block(50000), epr=quote_block(None), err=quote_block(90000))

    assert normalize(quote, 5000) == normalize(quote, 5000)
    assert combine(quote, 5000) == combine(quote, 5000)


def test_block_order_in_the_payload_does_not_matter():
    payload = quote_body(
        esr=quote_block(60000), epr=quote_block(60000), err=quote_block(40000)
    )["data"]
    forward = RawQuoteResponse.model_validate(payload)
    backward = RawQuoteResponse.model_validate(dict(reversed(list(payload.items()))))

    assert normalize(forward) == normalize(backward)
    assert combine(forward, 1000) == combine(backward, 1000)
