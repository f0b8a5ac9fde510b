import pytest

from nearby_cities.gazetteer.loader import GazetteerError, load_gazetteer, load_gazetteer_file
from nearby_cities.models.city import CityRecord

HEADER = "geonameid\tname\tasciiname\talternatenames\tlatitude\tlongitude\tfeature_class\tfeature_code\tcountry_code\tcc2\tadmin1\tadmin2\tadmin3\tadmin4\tpopulation"


def city_line(name, lat, lng, country, population):
    fields = ["1", name, name, "", str(lat), str(lng), "P", "PPL", country, "", "", "", "", "", str(population)]
    return "\t".join(fields)


def test_parses_fields_by_position():
    text = "\n".join([HEADER, city_line("Lyon", 45.748, 4.84671, "FR", 522969)])
    assert load_gazetteer(text) == [
        CityRecord(name="Lyon", lat=45.748, lng=4.84671, country="FR", population=522969)
    ]


def test_skips_header_line():
    # the first line is skipped even when it looks like data
    text = "\n".join(
        [
            city_line("Header City", 1.0, 1.0, "XX", 99999),
            city_line("Lyon", 45.748, 4.84671, "FR", 522969),
        ]
    )
    assert [city.name for city in load_gazetteer(text)] == ["Lyon"]


def test_population_floor_is_exclusive():
    text = "\n".join(
        [
            HEADER,
            city_line("Exactly", 10.0, 10.0, "AA", 10000),
            city_line("Above", 11.0, 11.0, "BB", 10001),
        ]
    )
    assert [city.name for city in load_gazetteer(text)] == ["Above"]


def test_custom_population_floor():
    text = "\n".join([HEADER, city_line("Town", 10.0, 10.0, "AA", 5000)])
    assert len(load_gazetteer(text, min_population=1000)) == 1


def test_bad_coordinates_are_dropped():
    text = "\n".join(
        [
            HEADER,
            city_line("NoLat", "", 10.0, "AA", 50000),
            city_line("Text", "north", 10.0, "AA", 50000),
            city_line("Nan", "nan", 10.0, "AA", 50000),
            city_line("Inf", 10.0, "inf", "AA", 50000),
            city_line("OutOfRange", 95.0, 10.0, "AA", 50000),
            city_line("Good", 10.0, 10.0, "AA", 50000),
        ]
    )
    assert [city.name for city in load_gazetteer(text)] == ["Good"]


def test_missing_or_non_numeric_population_defaults_to_zero():
    text = "\n".join(
        [
            HEADER,
            city_line("Words", 10.0, 10.0, "AA", "many"),
            city_line("Empty", 10.0, 10.0, "AA", ""),
        ]
    )
    assert load_gazetteer(text) == []
    assert len(load_gazetteer(text, min_population=-1)) == 2


def test_short_lines_do_not_crash():
    text = "\n".join([HEADER, "1\tShort\tShort", "", "garbage"])
    assert load_gazetteer(text) == []


def test_keeps_input_order():
    text = "\n".join(
        [
            HEADER,
            city_line("B", 2.0, 2.0, "BB", 20000),
            city_line("A", 1.0, 1.0, "AA", 20000),
            city_line("C", 3.0, 3.0, "CC", 20000),
        ]
    )
    assert [city.name for city in load_gazetteer(text)] == ["B", "A", "C"]


def test_load_file(tmp_path):
    path = tmp_path / "cities.txt"
    path.write_text(
        "\n".join([HEADER, city_line("Lyon", 45.748, 4.84671, "FR", 522969)]) + "\n",
        encoding="utf-8",
    )
    assert [city.name for city in load_gazetteer_file(path)] == ["Lyon"]


def test_missing_file_raises(tmp_path):
    with pytest.raises(GazetteerError):
        load_gazetteer_file(tmp_path / "missing.txt")


@pytest.mark.parametrize("separator", ["\u2028", "\u2029", "\x85", "\x1c", "\x1e", "\x0b", "\x0c"])
def test_line_separators_inside_a_field_keep_the_row(separator):
    fields = ["1", "Lyon", "Lyon", f"Lyon{separator}Lugdunum", "45.748", "4.84671", "P", "PPL", "FR", "", "", "", "", "", "522969"]
    text = "\n".join([HEADER, "\t".join(fields)])
    assert [city.name for city in load_gazetteer(text)] == ["Lyon"]


def test_crlf_line_endings():
    text = "\r\n".join(
        [HEADER, city_line("Lyon", 45.748, 4.84671, "FR", 522969), city_line("Paris", 48.85341, 2.3488, "FR", 2138551)]
    ) + "\r\n"
    assert [(city.name, city.population) for city in load_gazetteer(text)] == [
        ("Lyon", 522969),
        ("Paris", 2138551),
    ]
