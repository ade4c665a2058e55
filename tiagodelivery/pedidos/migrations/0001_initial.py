from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('lojas', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Pedido',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('data_pedido', models.DateTimeField(auto_now_add=True, verbose_name='Data do Pedido')),
                ('status', models.CharField(choices=[('pending', 'Aguardando Confirmação'), ('confirmed', 'Confirmado'), ('preparing', 'Em Preparação'), ('delivering', 'Saiu para Entrega'), ('completed', 'Concluído'), ('cancelled', 'Cancelado')], db_index=True, default='pending', max_length=20, verbose_name='Status')),
                ('subtotal', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Subtotal')),
                ('taxa_entrega', models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name='Taxa de Entrega')),
                ('total', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Total do Pedido')),
                ('nome_loja', models.CharField(max_length=255, verbose_name='Nome da Loja')),
                ('telefone_loja', models.CharField(blank=True, max_length=20, null=True, verbose_name='Telefone da Loja')),
                ('forma_pagamento', models.CharField(blank=True, max_length=30, null=True, verbose_name='Forma de Pagamento')),
                ('precisa_troco', models.BooleanField(default=False, verbose_name='Precisa de Troco')),
                ('valor_troco', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, verbose_name='Troco para')),
                ('nome_cliente', models.CharField(blank=True, max_length=255, null=True, verbose_name='Nome do Cliente')),
                ('telefone_cliente', models.CharField(blank=True, max_length=20, null=True, verbose_name='Telefone do Cliente')),
                ('loja', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pedidos', to='lojas.loja', verbose_name='Loja')),
                ('usuario', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pedidos', to=settings.AUTH_USER_MODEL, verbose_name='Cliente')),
            ],
            options={
                'verbose_name': 'Pedido',
                'verbose_name_plural': 'Pedidos',
                'db_table': 'pedido',
                'ordering': ['-data_pedido'],
            },
        ),
        migrations.CreateModel(
            name='ItemPedido',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_produto', models.CharField(max_length=255, verbose_name='Nome do Produto')),
                ('preco_unitario', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Preço Unitário na Compra')),
                ('quantidade', models.PositiveIntegerField(verbose_name='Quantidade')),
                ('subtotal', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Subtotal')),
                ('pedido', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='itens', to='pedidos.pedido')),
                ('produto', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='itens_pedido', to='lojas.produto', verbose_name='Produto Original')),
            ],
            options={
                'verbose_name': 'Item do Pedido',
                'verbose_name_plural': 'Itens do Pedido',
                'db_table': 'pedido_item',
                'ordering': ['id'],
            },
        ),
    ]
