"""
CategoryService 단위 테스트

테스트 대상:
- create(): 생성 및 이름 중복(대소문자 무시) 거부
- get_by_id(), rename(), delete(): 존재하지 않는 ID 처리
- rename(): 자기 자신의 이름으로 변경 허용
- search(): 부분 일치 검색
- delete(): 게시물이 참조하는 카테고리 삭제 거부
"""
import uuid
from unittest.mock import AsyncMock

import pytest

from blogger.exceptions import (
    CategoryAlreadyExistsError,
    CategoryInUseError,
    CategoryNotFoundError,
    InvalidCategoryNameError,
    StorageConflictError,
)


class TestCategoryCreate:
    """CategoryService.create() 테스트"""

    @pytest.mark.asyncio
    async def test_create_then_get(self, category_service):
        """생성 후 ID로 조회하면 같은 이름 반환"""
        created = await category_service.create('Sport')
        fetched = await category_service.get_by_id(created.id)

        assert isinstance(created.id, uuid.UUID)
        assert fetched.id == created.id
        assert fetched.name == 'Sport'

    @pytest.mark.asyncio
    async def test_create_duplicate_name_rejected(self, category_service):
        """동일 이름 두 번 생성 시 CategoryAlreadyExistsError"""
        await category_service.create('Sci-Fi')

        with pytest.raises(CategoryAlreadyExistsError) as exc_info:
            await category_service.create('Sci-Fi')

        assert exc_info.value.name == 'Sci-Fi'
        assert 'Sci-Fi' in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_create_duplicate_name_ignores_case(self, category_service):
        """대소문자만 다른 이름도 중복으로 거부"""
        await category_service.create('Sci-Fi')

        with pytest.raises(CategoryAlreadyExistsError):
            await category_service.create('SCI-FI')

    @pytest.mark.asyncio
    async def test_failed_create_writes_nothing(self, category_service):
        """중복 거부 시 저장소에 기록되지 않음"""
        await category_service.create('Music')

        with pytest.raises(CategoryAlreadyExistsError):
            await category_service.create('music')

        assert await category_service.count() == 1

    @pytest.mark.asyncio
    async def test_race_surfaces_storage_conflict(self, category_service, category_repository):
        """사전 검사를 통과한 중복 쓰기는 StorageConflictError로 전달"""
        await category_service.create('Sci-Fi')

        # 동시 요청이 사전 검사를 모두 통과한 상황을 재현
        category_repository.exists_by_name = AsyncMock(return_value=False)

        with pytest.raises(StorageConflictError):
            await category_service.create('Sci-Fi')

        assert await category_service.count() == 1

    @pytest.mark.asyncio
    async def test_create_duplicate_non_ascii_name_ignores_case(self, category_service):
        """ASCII 외 문자도 대소문자 무시 중복으로 거부"""
        await category_service.create('Café')

        with pytest.raises(CategoryAlreadyExistsError):
            await category_service.create('CAFÉ')

        assert await category_service.count() == 1

    @pytest.mark.asyncio
    async def test_create_blank_name_rejected(self, category_service):
        """빈 이름 또는 공백만 있는 이름은 InvalidCategoryNameError, 기록 없음"""
        for name in ['', '   ']:
            with pytest.raises(InvalidCategoryNameError):
                await category_service.create(name)

        assert await category_service.count() == 0

    @pytest.mark.asyncio
    async def test_create_strips_surrounding_whitespace(self, category_service):
        """앞뒤 공백은 제거 후 저장, 중복 검사도 제거된 이름 기준"""
        category = await category_service.create('  Sport  ')

        assert category.name == 'Sport'
        with pytest.raises(CategoryAlreadyExistsError):
            await category_service.create('sport ')


class TestCategoryLookup:
    """CategoryService.get_by_id(), list_all(), search() 테스트"""

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, category_service):
        """존재하지 않는 ID 조회 시 CategoryNotFoundError"""
        missing = uuid.uuid4()

        with pytest.raises(CategoryNotFoundError) as exc_info:
            await category_service.get_by_id(missing)

        assert exc_info.value.category_id == missing

    @pytest.mark.asyncio
    async def test_list_all(self, category_service, sample_category_names):
        """전체 목록 조회"""
        for name in sample_category_names:
            await category_service.create(name)

        categories = await category_service.list_all()

        assert {c.name for c in categories} == set(sample_category_names)

    @pytest.mark.asyncio
    async def test_list_all_ordered_by_name(self, category_service):
        """생성 순서와 무관하게 이름순 정렬"""
        for name in ['Zebra', 'Apple', 'Mango']:
            await category_service.create(name)

        categories = await category_service.list_all()

        assert [c.name for c in categories] == ['Apple', 'Mango', 'Zebra']

    @pytest.mark.asyncio
    async def test_search_non_ascii_ignores_case(self, category_service):
        """ASCII 외 문자도 대소문자 무시 부분 일치"""
        await category_service.create('École')
        await category_service.create('Sport')

        assert [c.name for c in await category_service.search('éco')] == ['École']
        assert [c.name for c in await category_service.search('ÉCOLE')] == ['École']

    @pytest.mark.asyncio
    async def test_list_all_empty(self, category_service):
        """카테고리가 없으면 빈 목록"""
        assert await category_service.list_all() == []

    @pytest.mark.asyncio
    async def test_search_substring_ignores_case(self, category_service, sample_category_names):
        """이름 부분 일치 검색 (대소문자 무시)"""
        for name in sample_category_names:
            await category_service.create(name)

        result = await category_service.search('SPORT')

        assert {c.name for c in result} == {'Sport', 'Sports Car'}

    @pytest.mark.asyncio
    async def test_search_no_match(self, category_service, sample_category_names):
        """일치하는 카테고리가 없으면 빈 목록"""
        for name in sample_category_names:
            await category_service.create(name)

        assert await category_service.search('cooking') == []

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(self, category_service):
        """% 와 _ 는 와일드카드가 아닌 문자로 검색"""
        await category_service.create('100% Cotton')
        await category_service.create('1000 Tips')
        await category_service.create('snake_case')
        await category_service.create('snakecase')

        assert [c.name for c in await category_service.search('100%')] == ['100% Cotton']
        assert [c.name for c in await category_service.search('e_c')] == ['snake_case']

    @pytest.mark.asyncio
    async def test_search_blank_fragment_rejected(self, category_service):
        """빈 검색어는 list_all()로 보내야 하므로 거부"""
        for fragment in ['', '   ']:
            with pytest.raises(ValueError):
                await category_service.search(fragment)


class TestCategoryRename:
    """CategoryService.rename() 테스트"""

    @pytest.mark.asyncio
    async def test_rename_success(self, category_service):
        """정상 이름 변경"""
        category = await category_service.create('Sport')

        renamed = await category_service.rename(category.id, 'Athletics')

        assert renamed.id == category.id
        assert renamed.name == 'Athletics'
        assert (await category_service.get_by_id(category.id)).name == 'Athletics'

    @pytest.mark.asyncio
    async def test_rename_to_own_name(self, category_service):
        """자기 자신의 현재 이름으로 변경은 중복이 아님"""
        category = await category_service.create('Sport')

        renamed = await category_service.rename(category.id, 'Sport')

        assert renamed.name == 'Sport'

    @pytest.mark.asyncio
    async def test_rename_own_name_case_change(self, category_service):
        """자기 이름의 대소문자만 변경하는 것도 허용"""
        category = await category_service.create('Sport')

        renamed = await category_service.rename(category.id, 'SPORT')

        assert renamed.name == 'SPORT'

    @pytest.mark.asyncio
    async def test_rename_collision_with_other(self, category_service):
        """다른 카테고리 이름과 충돌 시 CategoryAlreadyExistsError"""
        await category_service.create('Music')
        category = await category_service.create('Sport')

        with pytest.raises(CategoryAlreadyExistsError):
            await category_service.rename(category.id, 'music')

        assert (await category_service.get_by_id(category.id)).name == 'Sport'

    @pytest.mark.asyncio
    async def test_rename_unknown_id(self, category_service):
        """존재하지 않는 ID 변경 시 CategoryNotFoundError"""
        with pytest.raises(CategoryNotFoundError):
            await category_service.rename(uuid.uuid4(), 'Anything')

    @pytest.mark.asyncio
    async def test_rename_to_blank_rejected(self, category_service):
        """공백 이름으로 변경 시 InvalidCategoryNameError, 이름 유지"""
        category = await category_service.create('Sport')

        with pytest.raises(InvalidCategoryNameError):
            await category_service.rename(category.id, '   ')

        assert (await category_service.get_by_id(category.id)).name == 'Sport'

    @pytest.mark.asyncio
    async def test_rename_non_ascii_collision(self, category_service):
        """ASCII 외 문자 대소문자 차이도 다른 카테고리와 충돌"""
        await category_service.create('Ñandú')
        category = await category_service.create('Sport')

        with pytest.raises(CategoryAlreadyExistsError):
            await category_service.rename(category.id, 'ñANDÚ')


class TestCategoryDelete:
    """CategoryService.delete() 테스트"""

    @pytest.mark.asyncio
    async def test_delete_success(self, category_service):
        """정상 삭제 후 조회 불가"""
        category = await category_service.create('Sport')

        assert await category_service.delete(category.id) is True

        with pytest.raises(CategoryNotFoundError):
            await category_service.get_by_id(category.id)

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, category_service):
        """존재하지 않는 ID 삭제 시 CategoryNotFoundError"""
        with pytest.raises(CategoryNotFoundError):
            await category_service.delete(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_delete_referenced_category_rejected(self, category_service, post_service, sample_post):
        """게시물이 참조하는 카테고리는 삭제 거부"""
        category = await category_service.create('Sport')
        await post_service.create(sample_post['title'], sample_post['content'], category.id)

        with pytest.raises(CategoryInUseError) as exc_info:
            await category_service.delete(category.id)

        assert exc_info.value.post_count == 1
        assert (await category_service.get_by_id(category.id)).name == 'Sport'

    @pytest.mark.asyncio
    async def test_name_reusable_after_delete(self, category_service):
        """삭제된 카테고리 이름은 다시 사용 가능"""
        category = await category_service.create('Sport')
        await category_service.delete(category.id)

        recreated = await category_service.create('Sport')

        assert recreated.id != category.id
