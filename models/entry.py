from database import db
from datetime import datetime

class LearningEntry(db.Model):
    __tablename__ = "learning"

    id = db.Column(db.Integer, primary_key=True)
    learning_date = db.Column(db.DateTime, nullable=False)
    genre = db.Column(db.String(50), nullable=False)
    learning_time = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.now, nullable=False)

    def __repr__(self):
        return f"<LearningEntry {self.learning_date:%Y-%m-%d} {self.genre} {self.learning_time}>"
