from espnowsync.nodes import NodeTable

ME = 0x020000001111
OTHER = 0x020000002222
LOW = 0x020000000001


def test_new_and_known_nodes():
    table = NodeTable(ME)
    assert table.add_or_update(ME, 5000) is True
    assert table.add_or_update(OTHER, 7000, -50) is True
    assert table.add_or_update(OTHER, 8000, -50) is False
    assert len(table) == 2
    assert OTHER in table
    assert LOW not in table


def test_leader_is_largest_mac():
    table = NodeTable(ME)
    assert table.leader() is None
    table.add_or_update(ME, 1000)
    table.add_or_update(LOW, 1000)
    assert table.leader() == ME
    table.add_or_update(OTHER, 1000)
    assert table.leader() == OTHER


def test_drop_stale_keeps_progressing_nodes():
    table = NodeTable(ME)
    table.add_or_update(ME, 5000)
    table.add_or_update(OTHER, 5000)
    assert table.drop_stale() == []
    table.add_or_update(ME, 9000)
    dropped = table.drop_stale()
    assert dropped == [OTHER]
    assert OTHER not in table
    assert ME in table
    assert len(table) == 1


def test_rssi_average_on_repeat_reports():
    table = NodeTable(ME)
    table.add_or_update(OTHER, 1000, -60)
    first = table.format_rssi(0)
    assert f"*{OTHER & 0xFFFF:04X}:000" in first
    table.add_or_update(OTHER, 2000, -60)
    assert f"*{OTHER & 0xFFFF:04X}:-30" in table.format_rssi(0)


def test_own_node_marked_and_zero_rssi():
    table = NodeTable(ME)
    table.add_or_update(ME, 1000, -70)
    table.add_or_update(ME, 2000, -70)
    text = table.format_rssi(42)
    assert f"#{ME & 0xFFFF:04X}:000" in text
    assert text.startswith("[42]\t>>>1[")


def test_format_time_lists_every_node():
    table = NodeTable(ME)
    table.add_or_update(LOW, 3000)
    table.add_or_update(ME, 4000)
    text = table.format_time(1234)
    assert text.startswith("[1234]===>2[")
    assert text.endswith("]<===\n")
    assert text.index(f"{LOW:X}") < text.index(f"{ME:X}")


def test_format_alive_shows_leader_phase():
    table = NodeTable(ME)
    table.add_or_update(ME, 5250)
    text = table.format_alive(10)
    assert text.startswith("[10]>>>1[ #1111:")
    assert text.endswith("]<<< 250(750)ms\n")


def test_format_old_reflects_keepalive_times():
    table = NodeTable(ME)
    table.add_or_update(ME, 8000)
    table.drop_stale()
    text = table.format_old(5)
    assert text.startswith("[5]--->1(")
    assert f" {ME:X}:8" in text
    assert text.endswith(")<---\n")