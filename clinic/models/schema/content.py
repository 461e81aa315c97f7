from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from clinic.database import Base, utcnow


class ContactMessageEntry(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    phone = Column(String(32), nullable=False)
    email = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class BlogPostEntry(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    excerpt = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(64), nullable=False)
    image_url = Column(String(500), nullable=True)
    read_time = Column(String(32), nullable=False, default="5 dakika")
    published_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class TestimonialEntry(Base):
    __tablename__ = "testimonials"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    review = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False, default=5)
    approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
