import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import conversations.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('listings', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Conversation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('conversation_id', models.CharField(default=conversations.models.generate_conversation_id, editable=False, max_length=100, unique=True)),
                ('participant_a', models.CharField(db_index=True, max_length=100)),
                ('participant_b', models.CharField(db_index=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('last_message_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('subject_listing', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='conversations', to='listings.listing')),
            ],
            options={
                'db_table': 'conversations_conversation',
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('subject_listing__isnull', False)), fields=('participant_a', 'participant_b', 'subject_listing'), name='unique_conversation_per_subject'),
                    models.UniqueConstraint(condition=models.Q(('subject_listing__isnull', True)), fields=('participant_a', 'participant_b'), name='unique_unscoped_conversation'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ConversationMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sender_id', models.CharField(max_length=100)),
                ('body', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('conversation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='messages', to='conversations.conversation')),
            ],
            options={
                'db_table': 'conversations_conversationmessage',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['conversation', 'created_at'], name='conv_msg_conv_created_idx'),
                    models.Index(fields=['conversation', 'read_at'], name='conv_msg_conv_read_idx'),
                ],
            },
        ),
    ]
