from fastapi import APIRouter, Depends, status

from clinic.middlewares.roles import ADMIN_ONLY, CurrentUser, require_roles
from clinic.routers.errors import not_found
from clinic.schemas.appointments import ContactMessageCreate, ContactMessageResponse
from clinic.schemas.content import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
    TestimonialCreate,
    TestimonialResponse,
    TestimonialUpdate,
)
from clinic.services.content import (
    blog_records,
    contact_records,
    create_blog_post,
    testimonial_records,
)

router = APIRouter(tags=["content"])

admin_only = Depends(require_roles(*ADMIN_ONLY))


def _changes(payload) -> dict:
    return {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }


@router.post(
    "/contact",
    response_model=ContactMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_contact_message(payload: ContactMessageCreate) -> ContactMessageResponse:
    return ContactMessageResponse.model_validate(
        contact_records.create(**payload.model_dump())
    )


@router.get("/contact", response_model=list[ContactMessageResponse])
def list_contact_messages(_: CurrentUser = admin_only) -> list[ContactMessageResponse]:
    return [ContactMessageResponse.model_validate(m) for m in contact_records.list()]


@router.delete("/contact/{message_id}")
def delete_contact_message(message_id: int, _: CurrentUser = admin_only) -> dict:
    if not contact_records.delete(message_id):
        raise not_found("Contact message")
    return {"message": "Mesaj silindi"}


@router.get("/blog", response_model=list[BlogPostResponse])
def list_blog_posts() -> list[BlogPostResponse]:
    return [BlogPostResponse.model_validate(post) for post in blog_records.list()]


@router.get("/blog/{post_id}", response_model=BlogPostResponse)
def get_blog_post(post_id: int) -> BlogPostResponse:
    post = blog_records.get(post_id)
    if post is None:
        raise not_found("Blog post")
    return BlogPostResponse.model_validate(post)


@router.post(
    "/blog", response_model=BlogPostResponse, status_code=status.HTTP_201_CREATED
)
def create_blog(payload: BlogPostCreate, _: CurrentUser = admin_only) -> BlogPostResponse:
    return BlogPostResponse.model_validate(create_blog_post(payload))


@router.patch("/blog/{post_id}", response_model=BlogPostResponse)
def update_blog(
    post_id: int, payload: BlogPostUpdate, _: CurrentUser = admin_only
) -> BlogPostResponse:
    post = blog_records.update(post_id, **_changes(payload))
    if post is None:
        raise not_found("Blog post")
    return BlogPostResponse.model_validate(post)


@router.delete("/blog/{post_id}")
def delete_blog(post_id: int, _: CurrentUser = admin_only) -> dict:
    if not blog_records.delete(post_id):
        raise not_found("Blog post")
    return {"message": "Yazı silindi"}


@router.get("/testimonials/approved", response_model=list[TestimonialResponse])
def list_approved_testimonials() -> list[TestimonialResponse]:
    return [
        TestimonialResponse.model_validate(item)
        for item in testimonial_records.list(approved=True)
    ]


@router.get("/testimonials", response_model=list[TestimonialResponse])
def list_testimonials(_: CurrentUser = admin_only) -> list[TestimonialResponse]:
    return [TestimonialResponse.model_validate(t) for t in testimonial_records.list()]


@router.post(
    "/testimonials",
    response_model=TestimonialResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_testimonial(
    payload: TestimonialCreate, _: CurrentUser = admin_only
) -> TestimonialResponse:
    return TestimonialResponse.model_validate(
        testimonial_records.create(**payload.model_dump())
    )


@router.patch("/testimonials/{testimonial_id}", response_model=TestimonialResponse)
def update_testimonial(
    testimonial_id: int, payload: TestimonialUpdate, _: CurrentUser = admin_only
) -> TestimonialResponse:
    item = testimonial_records.update(testimonial_id, **_changes(payload))
    if item is None:
        raise not_found("Testimonial")
    return TestimonialResponse.model_validate(item)


@router.delete("/testimonials/{testimonial_id}")
def delete_testimonial(testimonial_id: int, _: CurrentUser = admin_only) -> dict:
    if not testimonial_records.delete(testimonial_id):
        raise not_found("Testimonial")
    return {"message": "Yorum silindi"}
