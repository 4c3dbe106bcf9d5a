"""位置情報プライバシーサービスのテスト"""

import math

import pytest

from geotag.features.privacy.domain.models import DecodedCode, PrivacyLocation
from geotag.features.privacy.domain.tag_grammar import is_valid_tag
from geotag.features.privacy.providers.base import BaseCodeProvider
from geotag.features.privacy.services.location_privacy_service import (
    LocationPrivacyService,
)
from geotag.shared.exceptions.errors import CodeProviderError, InvalidCoordinateError

LONDON = (51.5074, -0.1278)
AMSTERDAM = (52.3676, 4.9041)

CITY_COORDINATES = [
    LONDON,
    AMSTERDAM,
    (-33.8688, 151.2093),
    (40.7128, -74.0060),
    (35.6762, 139.6503),
]

SAMPLE_COORDINATES = CITY_COORDINATES + [
    (0.0, 0.0),
    (-89.999, -179.999),
    (89.999, 179.999),
    (90.0, 180.0),
    (-90.0, -180.0),
]


@pytest.fixture
def service() -> LocationPrivacyService:
    return LocationPrivacyService()


class FailingDecodeProvider(BaseCodeProvider):
    """デコードだけ失敗するプロバイダー"""

    def encode(self, latitude: float, longitude: float) -> str:
        return "9C3XGV2F+2V"

    def decode(self, code: str) -> DecodedCode:
        raise CodeProviderError(f"cannot decode {code}")


class FailingEncodeProvider(BaseCodeProvider):
    """エンコードが失敗するプロバイダー"""

    def encode(self, latitude: float, longitude: float) -> str:
        raise CodeProviderError("encoder offline")

    def decode(self, code: str) -> DecodedCode:
        return DecodedCode(latitude=51.525, longitude=-0.125, resolution=0.05)


class GarbageEncodeProvider(FailingEncodeProvider):
    """書式を満たさないコードを返すプロバイダー"""

    def encode(self, latitude: float, longitude: float) -> str:
        return "9C3"


class TestTruncate:
    """truncateのテスト"""

    def test_london(self, service: LocationPrivacyService) -> None:
        """ロンドンは#geo9c3xgvのセルに切り詰められる"""
        location = service.truncate(*LONDON, label="Central London")

        assert location.tag == "#geo9c3xgv"
        assert location.full_code.startswith("9C3XGV")
        assert location.label == "Central London"
        assert location.precision_km == 1.0
        assert location.center_lat == pytest.approx(51.525)
        assert location.center_lng == pytest.approx(-0.125)

    def test_center_is_not_input(self, service: LocationPrivacyService) -> None:
        """中心は入力座標ではなくセルの中心"""
        location = service.truncate(*LONDON)

        assert (location.center_lat, location.center_lng) != LONDON
        assert not hasattr(location, "latitude")
        assert "51.5074" not in repr(location.to_dict())

    def test_tag_derived_from_full_code(self, service: LocationPrivacyService) -> None:
        """タグは完全なコードの先頭6文字を小文字にしたもの"""
        for lat, lng in SAMPLE_COORDINATES:
            location = service.truncate(lat, lng)
            assert location.tag == "#geo" + location.full_code[:6].lower()

    def test_tag_is_lowercase_and_valid(self, service: LocationPrivacyService) -> None:
        """範囲内の座標からは常に小文字の有効なタグができる"""
        for lat, lng in SAMPLE_COORDINATES:
            tag = service.truncate(lat, lng).tag
            assert tag == tag.lower()
            assert is_valid_tag(tag)

    def test_distinct_cities(self, service: LocationPrivacyService) -> None:
        """ロンドンとアムステルダムは別のタグ"""
        london = service.truncate(*LONDON)
        amsterdam = service.truncate(*AMSTERDAM)

        assert amsterdam.tag == "#geo9f469w"
        assert london.tag != amsterdam.tag

    def test_deterministic(self, service: LocationPrivacyService) -> None:
        """同じ座標からは同じタグ"""
        assert service.truncate(*LONDON) == service.truncate(*LONDON)

    def test_nearby_points_share_tag(self, service: LocationPrivacyService) -> None:
        """同じセル内の異なる地点は区別できない"""
        a = service.truncate(51.5074, -0.1278)
        b = service.truncate(51.5101, -0.1340)

        assert a.tag == b.tag
        assert (a.center_lat, a.center_lng) == (b.center_lat, b.center_lng)

    @pytest.mark.parametrize(
        "lat,lng",
        [
            (90.0001, 0.0),
            (-91.0, 0.0),
            (0.0, 180.5),
            (0.0, -181.0),
            (math.nan, 0.0),
            (0.0, math.inf),
        ],
    )
    def test_out_of_range(
        self, service: LocationPrivacyService, lat: float, lng: float
    ) -> None:
        """範囲外の座標は丸めずにエラー"""
        with pytest.raises(InvalidCoordinateError):
            service.truncate(lat, lng)

    def test_encode_failure_is_fatal(self) -> None:
        """エンコード失敗はそのまま例外"""
        service = LocationPrivacyService(FailingEncodeProvider())
        with pytest.raises(CodeProviderError):
            service.truncate(*LONDON)

    def test_decode_failure_is_fatal(self) -> None:
        """中心が求められない場合は部分的な結果を返さない"""
        service = LocationPrivacyService(FailingDecodeProvider())
        with pytest.raises(CodeProviderError):
            service.truncate(*LONDON)

    def test_garbage_code_is_rejected(self) -> None:
        """書式を満たさないコードからはタグを作らない"""
        service = LocationPrivacyService(GarbageEncodeProvider())
        with pytest.raises(CodeProviderError):
            service.truncate(*LONDON)


class TestReconstruct:
    """reconstructのテスト"""

    def test_round_trip(self, service: LocationPrivacyService) -> None:
        """タグから復元した中心はtruncateの中心と一致"""
        for lat, lng in SAMPLE_COORDINATES:
            location = service.truncate(lat, lng)
            area = service.reconstruct(location.tag)

            assert area is not None
            assert area.center.lat == location.center_lat
            assert area.center.lng == location.center_lng

    def test_area_sanity(self, service: LocationPrivacyService) -> None:
        """領域は中心を挟み、幅は0〜0.1度"""
        for lat, lng in SAMPLE_COORDINATES:
            area = service.reconstruct(service.truncate(lat, lng).tag)

            assert area is not None
            assert area.south_west.lat < area.center.lat < area.north_east.lat
            assert area.south_west.lng < area.center.lng < area.north_east.lng
            assert 0 < area.lat_span < 0.1
            assert 0 < area.lng_span < 0.1

    def test_original_point_inside_area(self, service: LocationPrivacyService) -> None:
        """元の座標は自分のタグの領域に含まれる"""
        for lat, lng in CITY_COORDINATES:
            location = service.truncate(lat, lng)
            assert service.contains(lat, lng, location.tag)

    def test_case_insensitive(self, service: LocationPrivacyService) -> None:
        """大文字のタグでも同じ領域"""
        assert service.reconstruct("#GEO9C3XGV") == service.reconstruct("#geo9c3xgv")

    @pytest.mark.parametrize("tag", ["", "#geo9c3x", "#geo9c3xgv2", "9c3xgv", "#geo9c3xga"])
    def test_invalid_tag(self, service: LocationPrivacyService, tag: str) -> None:
        """書式不正はNone"""
        assert service.reconstruct(tag) is None

    def test_undecodable_tag(self, service: LocationPrivacyService) -> None:
        """書式は正しいが存在しないセルはゼロ領域ではなくNone"""
        assert service.reconstruct("#geoxxxxxx") is None

    def test_provider_failure_returns_none(self) -> None:
        """デコード失敗は例外を出さずNone"""
        service = LocationPrivacyService(FailingDecodeProvider())
        assert service.reconstruct("#geo9c3xgv") is None


class TestContains:
    """containsのテスト"""

    def test_center_is_contained(self, service: LocationPrivacyService) -> None:
        """領域の中心は常に含まれる"""
        for lat, lng in SAMPLE_COORDINATES:
            tag = service.truncate(lat, lng).tag
            area = service.reconstruct(tag)
            assert area is not None
            assert service.contains(area.center.lat, area.center.lng, tag)

    def test_corners_are_inclusive(self, service: LocationPrivacyService) -> None:
        """境界上の点も含まれる"""
        area = service.reconstruct("#geo9c3xgv")
        assert area is not None
        assert service.contains(area.south_west.lat, area.south_west.lng, "#geo9c3xgv")
        assert service.contains(area.north_east.lat, area.north_east.lng, "#geo9c3xgv")

    def test_far_point_not_contained(self, service: LocationPrivacyService) -> None:
        """約10km離れた点は含まれない"""
        tag = service.truncate(*LONDON).tag
        assert not service.contains(LONDON[0] + 0.09, LONDON[1], tag)
        assert not service.contains(LONDON[0], LONDON[1] + 0.15, tag)

    def test_invalid_tag(self, service: LocationPrivacyService) -> None:
        """不正なタグはFalse"""
        assert not service.contains(*LONDON, "#geo123")
        assert not service.contains(0.0, 0.0, "#geoxxxxxx")


class TestNearbyTags:
    """nearby_tagsのテスト"""

    def test_london_neighbors(self, service: LocationPrivacyService) -> None:
        """自分を先頭に8方向すべて別のセル"""
        tag = service.truncate(*LONDON).tag
        nearby = service.nearby_tags(tag)

        assert nearby[0] == tag
        assert len(nearby) == 9
        assert len(set(nearby)) == len(nearby)
        assert all(is_valid_tag(t) for t in nearby)

    def test_properties_for_samples(self, service: LocationPrivacyService) -> None:
        """件数は1〜9、重複なし、すべて有効"""
        for lat, lng in SAMPLE_COORDINATES:
            tag = service.truncate(lat, lng).tag
            nearby = service.nearby_tags(tag)

            assert tag in nearby
            assert 1 <= len(nearby) <= 9
            assert len(set(nearby)) == len(nearby)
            assert all(is_valid_tag(t) for t in nearby)

    def test_neighbors_are_adjacent(self, service: LocationPrivacyService) -> None:
        """近隣タグの中心は元のセルから1セル分の距離"""
        tag = service.truncate(*LONDON).tag
        origin = service.reconstruct(tag)
        assert origin is not None

        for neighbor in service.nearby_tags(tag)[1:]:
            area = service.reconstruct(neighbor)
            assert area is not None
            d_lat = round(abs(area.center.lat - origin.center.lat), 6)
            d_lng = round(abs(area.center.lng - origin.center.lng), 6)
            assert d_lat in (0.0, 0.05)
            assert d_lng in (0.0, 0.05)
            assert (d_lat, d_lng) != (0.0, 0.0)

    def test_uppercase_input_is_normalized(self, service: LocationPrivacyService) -> None:
        """大文字で渡しても正規形で返す"""
        nearby = service.nearby_tags("#GEO9C3XGV")
        assert nearby[0] == "#geo9c3xgv"
        assert len(set(nearby)) == len(nearby)

    def test_zero_radius(self, service: LocationPrivacyService) -> None:
        """倍率0なら自分だけ"""
        assert service.nearby_tags("#geo9c3xgv", radius_multiplier=0) == ["#geo9c3xgv"]

    def test_larger_radius(self, service: LocationPrivacyService) -> None:
        """倍率を上げると離れたセルになる"""
        near = set(service.nearby_tags("#geo9c3xgv"))
        far = set(service.nearby_tags("#geo9c3xgv", radius_multiplier=3))

        assert len(far) == 9
        assert near & far == {"#geo9c3xgv"}

    def test_near_pole_skips_out_of_range(self, service: LocationPrivacyService) -> None:
        """極を越える方向は除外される"""
        tag = service.truncate(89.99, 0.0).tag
        nearby = service.nearby_tags(tag)

        assert nearby[0] == tag
        assert len(nearby) == 6

    def test_antimeridian_wraps(self, service: LocationPrivacyService) -> None:
        """日付変更線をまたぐ近隣も有効なタグ"""
        tag = service.truncate(10.0, 179.99).tag
        nearby = service.nearby_tags(tag)

        assert len(nearby) == 9
        assert any(service.reconstruct(t).center.lng < 0 for t in nearby)

    def test_invalid_tag(self, service: LocationPrivacyService) -> None:
        """不正なタグは空リスト"""
        assert service.nearby_tags("#notatag") == []
        assert service.nearby_tags("#geoxxxxxx") == []


class TestPresentation:
    """表示用ヘルパーのテスト"""

    def test_format_with_label(self, service: LocationPrivacyService) -> None:
        location = service.truncate(*LONDON, label="Soho")
        assert service.format_for_display(location) == "#geo9c3xgv (Soho) ~1km area"

    def test_format_without_label(self, service: LocationPrivacyService) -> None:
        location = service.truncate(*LONDON)
        assert service.format_for_display(location) == "#geo9c3xgv ~1km area"

    def test_describe_tag(self, service: LocationPrivacyService) -> None:
        assert (
            service.describe_tag("#GEO9C3XGV")
            == "Approximate area: ~1km radius (#geo9c3xgv)"
        )
        assert service.describe_tag("#geo12") == "Invalid location"


class TestMergeLocationTags:
    """merge_location_tagsのテスト"""

    def test_prepends_missing_tags(self, service: LocationPrivacyService) -> None:
        london = service.truncate(*LONDON)
        merged = service.merge_location_tags(["#pothole"], london)
        assert merged == ["#geo9c3xgv", "#pothole"]

    def test_skips_existing_tags(self, service: LocationPrivacyService) -> None:
        london = service.truncate(*LONDON)
        merged = service.merge_location_tags(["#GEO9C3XGV", "#pothole"], london)
        assert merged == ["#GEO9C3XGV", "#pothole"]

    def test_multiple_locations(self, service: LocationPrivacyService) -> None:
        london = service.truncate(*LONDON)
        amsterdam = service.truncate(*AMSTERDAM)
        merged = service.merge_location_tags([], london, amsterdam, london)
        assert merged == ["#geo9c3xgv", "#geo9f469w"]


def test_module_level_functions() -> None:
    """デフォルトインスタンスの簡易関数"""
    from geotag.features.privacy.services import location_privacy_service as lps

    location = lps.truncate(*LONDON)
    assert isinstance(location, PrivacyLocation)
    assert lps.reconstruct(location.tag) is not None
    assert lps.contains(*LONDON, location.tag)
    assert location.tag in lps.nearby_tags(location.tag)
